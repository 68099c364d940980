"""
Inventory ledger.

The ledger owns the stock count of every menu item. Each mutation runs in a
transaction, locks the row it touches and rewrites the menu item's
``is_available`` flag before the transaction commits, so catalog reads never
disagree with committed stock.
"""
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import NotFound

from authentication.exceptions import Conflict
from .exceptions import InsufficientStock
from .models import Inventory, MenuItem, MAX_QUANTITY

logger = logging.getLogger(__name__)


def sync_availability(menu_item_id, quantity):
    MenuItem.objects.filter(pk=menu_item_id).update(is_available=quantity > 0, updated_at=timezone.now())


def get(menu_item_id):
    inventory = Inventory.objects.select_related('menu_item').filter(menu_item_id=menu_item_id).first()
    if inventory is None:
        raise NotFound('Inventory not found')
    return inventory


def _locked(menu_item_id):
    return Inventory.objects.select_for_update().filter(menu_item_id=menu_item_id).first()


def _clamp(value):
    return max(0, min(MAX_QUANTITY, int(value)))


def _store_quantity(inventory, quantity):
    old = inventory.quantity
    inventory.quantity = _clamp(quantity)
    inventory.save()
    sync_availability(inventory.menu_item_id, inventory.quantity)
    logger.info(f"Inventory for item {inventory.menu_item_id}: {old} -> {inventory.quantity}")
    return inventory


def _get_or_create_locked(menu_item_id):
    inventory = _locked(menu_item_id)
    if inventory is None:
        if not MenuItem.objects.filter(pk=menu_item_id).exists():
            raise NotFound('Menu item not found')
        inventory = Inventory.objects.create(menu_item_id=menu_item_id, quantity=0)
        logger.info(f"Created inventory record for item {menu_item_id}")
    return inventory


@transaction.atomic
def adjust_absolute(menu_item_id, quantity):
    """Set stock to `quantity`, clamped to [0, MAX_QUANTITY]. Missing records are created."""
    inventory = _get_or_create_locked(menu_item_id)
    return _store_quantity(inventory, int(quantity))


@transaction.atomic
def adjust_relative(menu_item_id, delta):
    """Add `delta` (may be negative) to stock, clamped to [0, MAX_QUANTITY]. Missing records start at 0."""
    inventory = _get_or_create_locked(menu_item_id)
    return _store_quantity(inventory, inventory.quantity + int(delta))


@transaction.atomic
def update(menu_item_id, quantity=None, adjust=None, low_stock_threshold=None, unit=None):
    """
    Administrative update. An absolute `quantity` wins over a relative
    `adjust` when both are given. Without a record, one is created only if a
    quantity change was requested.
    """
    if quantity is not None:
        inventory = adjust_absolute(menu_item_id, quantity)
    elif adjust is not None:
        inventory = adjust_relative(menu_item_id, adjust)
    else:
        inventory = _locked(menu_item_id)
        if inventory is None:
            raise NotFound('Inventory not found')

    if low_stock_threshold is None and unit is None:
        return inventory

    if low_stock_threshold is not None:
        inventory.low_stock_threshold = _clamp(low_stock_threshold)
    if unit is not None:
        inventory.unit = unit
    inventory.save(update_fields=['low_stock_threshold', 'unit', 'updated_at'])
    return inventory


@transaction.atomic
def create(menu_item, quantity=0, low_stock_threshold=0, unit=''):
    if Inventory.objects.filter(menu_item=menu_item).exists():
        raise Conflict('Inventory already exists for this item')

    inventory = Inventory.objects.create(
        menu_item=menu_item,
        quantity=_clamp(quantity),
        low_stock_threshold=_clamp(low_stock_threshold),
        unit=unit or '',
    )
    sync_availability(menu_item.pk, inventory.quantity)
    logger.info(f"Created inventory record for item {menu_item.pk} with quantity {inventory.quantity}")
    return inventory


def lock(menu_item_ids):
    """
    Lock the inventory rows of `menu_item_ids` for the rest of the current
    transaction. Rows are locked in ascending id order so two orders touching
    overlapping items cannot deadlock. Items without a record are absent from
    the returned dict.
    """
    ids = sorted(set(menu_item_ids))
    rows = Inventory.objects.select_for_update().filter(menu_item_id__in=ids).order_by('menu_item_id')
    return {row.menu_item_id: row for row in rows}


def debit(inventory, quantity):
    """
    Take `quantity` units out of a locked row. The UPDATE only matches while
    enough stock remains, so a stale read can never push the count below zero.
    """
    if transaction.get_autocommit():
        raise transaction.TransactionManagementError('debit() must run inside an atomic block')

    updated = Inventory.objects.filter(pk=inventory.pk, quantity__gte=quantity).update(
        quantity=F('quantity') - quantity, updated_at=timezone.now()
    )
    if not updated:
        current = Inventory.objects.filter(pk=inventory.pk).values_list('quantity', flat=True).first()
        raise InsufficientStock(inventory.menu_item_id, quantity, current)

    inventory.refresh_from_db(fields=['quantity', 'updated_at'])
    sync_availability(inventory.menu_item_id, inventory.quantity)
    return inventory


@transaction.atomic
def credit(menu_item_id, quantity):
    """Return `quantity` units to stock."""
    inventory = _get_or_create_locked(menu_item_id)
    return _store_quantity(inventory, inventory.quantity + int(quantity))
