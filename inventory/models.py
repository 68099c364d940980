from django.db import models
from django.utils.text import slugify

from authentication.models import TimeStampedModel

# Column limits: IntegerField quantities and BigAutoField ids
MAX_QUANTITY = 2147483647
MAX_ID = 9223372036854775807


class Category(TimeStampedModel):
    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=120, unique=True, blank=True)
    sort_order = models.IntegerField(default=0)

    def save(self, *args, **kwargs):
        self.name = self.name.strip()
        if not self.slug and self.name:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return str(self.name)

    class Meta:
        verbose_name_plural = "Categories"
        ordering = ['sort_order', 'name']


class MenuItem(TimeStampedModel):
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="items")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    price = models.DecimalField(max_digits=10, decimal_places=2)
    image_url = models.URLField(blank=True)
    tags = models.JSONField(default=list, blank=True)

    # Mirrors inventory.quantity > 0; the ledger rewrites it on every stock change
    is_available = models.BooleanField(default=True)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['name']
        constraints = [
            models.CheckConstraint(condition=models.Q(price__gte=0), name='menuitem_price_non_negative'),
        ]


class Inventory(TimeStampedModel):
    menu_item = models.OneToOneField(MenuItem, on_delete=models.CASCADE, related_name='inventory')
    quantity = models.IntegerField(default=0)
    low_stock_threshold = models.IntegerField(default=0)
    unit = models.CharField(max_length=20, blank=True, default='')

    def save(self, *args, **kwargs):
        if self.quantity < 0:
            self.quantity = 0
        if self.low_stock_threshold < 0:
            self.low_stock_threshold = 0
        super().save(*args, **kwargs)

    @property
    def is_low_stock(self):
        return self.quantity <= self.low_stock_threshold

    def __str__(self):
        return f"{self.menu_item.name}: {self.quantity} {self.unit}".strip()

    class Meta:
        verbose_name_plural = "Inventory"
        ordering = ['menu_item_id']
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=0), name='inventory_quantity_non_negative'),
            models.CheckConstraint(
                condition=models.Q(low_stock_threshold__gte=0), name='inventory_threshold_non_negative'
            ),
        ]
