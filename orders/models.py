from decimal import Decimal

from django.conf import settings
from django.db import models

from authentication.models import TimeStampedModel
from inventory.models import MenuItem

TWO_PLACES = Decimal('0.01')
# largest value a DecimalField(max_digits=10, decimal_places=2) holds
MAX_AMOUNT = Decimal('99999999.99')


def line_total(price, qty):
    return (Decimal(str(price)) * qty).quantize(TWO_PLACES)


class Cart(TimeStampedModel):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='cart')
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    def calculate_totals(self):
        """Recalculate cart totals from its lines"""
        subtotal = Decimal('0.00')
        for item in self.items.all():
            subtotal += line_total(item.price, item.qty)

        self.subtotal = subtotal.quantize(TWO_PLACES)
        self.total = self.subtotal

    def clear(self):
        self.items.all().delete()
        self.calculate_totals()
        self.save(update_fields=['subtotal', 'total', 'updated_at'])

    def __str__(self):
        return f"Cart of {self.user}"


class CartItem(models.Model):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name='cart_items')

    # Catalog snapshot taken when the line was added
    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    qty = models.PositiveIntegerField(default=1)

    @property
    def line_total(self):
        return line_total(self.price, self.qty)

    def __str__(self):
        return f"{self.qty} x {self.name}"

    class Meta:
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['cart', 'menu_item'], name='unique_cart_menu_item'),
            models.CheckConstraint(condition=models.Q(qty__gte=1), name='cartitem_qty_positive'),
        ]


class Order(TimeStampedModel):
    STATUS_PLACED = 'placed'
    STATUS_PREPARING = 'preparing'
    STATUS_READY = 'ready'
    STATUS_SERVED = 'served'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = (
        (STATUS_PLACED, 'Placed'),
        (STATUS_PREPARING, 'Preparing'),
        (STATUS_READY, 'Ready'),
        (STATUS_SERVED, 'Served'),
        (STATUS_CANCELLED, 'Cancelled'),
    )

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='orders')
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PLACED)
    notes = models.TextField(blank=True, default='')

    @classmethod
    def allowed_statuses(cls):
        return [value for value, _label in cls.STATUS_CHOICES]

    def __str__(self):
        return f"#{self.id} - {self.status}"

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='order_user_created_idx'),
            models.Index(fields=['status'], name='order_status_idx'),
        ]


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.SET_NULL, null=True, blank=True, related_name='order_items'
    )
    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    qty = models.PositiveIntegerField()

    @property
    def line_total(self):
        return line_total(self.price, self.qty)

    def __str__(self):
        return f"{self.qty} x {self.name}"

    class Meta:
        ordering = ['id']
        constraints = [
            models.CheckConstraint(condition=models.Q(qty__gte=1), name='orderitem_qty_positive'),
        ]
