# Signal to update cart totals when items change
from .models import CartItem, Cart
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver


@receiver([post_save, post_delete], sender=CartItem)
def update_cart_totals_on_item_change(sender, instance, **kwargs):
    """Update cart totals when items are added/removed/modified"""
    cart = Cart.objects.filter(pk=instance.cart_id).first()
    if cart is None:
        # cart itself is being deleted
        return
    cart.calculate_totals()
    cart.save(update_fields=['subtotal', 'total', 'updated_at'])
