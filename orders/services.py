"""
Order placement, cancellation and cart operations.

``place_order`` runs as one unit of work: the requested lines are planned
(aggregated per menu item and sorted by id), the inventory rows are locked in
that order, every line is validated, and only then are stock debits, the order
rows and the cart clear written. Any failure rolls the whole unit back.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction, DatabaseError
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from inventory import ledger
from inventory.exceptions import InsufficientStock, ItemNotFound
from inventory.models import MenuItem, MAX_QUANTITY
from .exceptions import (
    EmptyCart, OrderNotCancellable, CancellationWindowExpired,
    InvalidStatusTransition, OrderPersistenceError
)
from .models import Cart, CartItem, Order, OrderItem, line_total, MAX_AMOUNT, TWO_PLACES

logger = logging.getLogger(__name__)


# =============== ORDER PLACEMENT ===============

def _plan_from_items(items):
    """Aggregate inline items and price them from the catalog"""
    requested = {}
    for entry in items:
        menu_item_id = int(entry['menu_item_id'])
        quantity = int(entry['quantity'])
        if quantity < 1:
            raise ValidationError({'items': [f"Quantity for item {menu_item_id} must be at least 1"]})
        requested[menu_item_id] = requested.get(menu_item_id, 0) + quantity

    menu_items = MenuItem.objects.in_bulk(list(requested))
    plan = []
    for menu_item_id in sorted(requested):
        menu_item = menu_items.get(menu_item_id)
        if menu_item is None:
            raise ItemNotFound(menu_item_id)
        plan.append({
            'menu_item_id': menu_item_id,
            'name': menu_item.name,
            'price': menu_item.price,
            'qty': requested[menu_item_id],
        })
    return plan


def _plan_from_cart(cart):
    plan = {}
    for item in cart.items.all():
        line = plan.get(item.menu_item_id)
        if line is None:
            plan[item.menu_item_id] = {
                'menu_item_id': item.menu_item_id,
                'name': item.name,
                'price': item.price,
                'qty': item.qty,
            }
        else:
            line['qty'] += item.qty
    return [plan[key] for key in sorted(plan)]


def _validate_stock(plan, stock):
    for line in plan:
        inventory = stock.get(line['menu_item_id'])
        available = inventory.quantity if inventory is not None else 0
        if available < line['qty']:
            raise InsufficientStock(line['menu_item_id'], line['qty'], available)


def _apply(user, plan, stock, notes, cart):
    subtotal = sum((line_total(line['price'], line['qty']) for line in plan), Decimal('0.00'))
    subtotal = subtotal.quantize(TWO_PLACES)
    if subtotal > MAX_AMOUNT:
        raise ValidationError({'items': [f"Order total cannot exceed {MAX_AMOUNT}."]})

    for line in plan:
        ledger.debit(stock[line['menu_item_id']], line['qty'])

    order = Order.objects.create(
        user=user,
        subtotal=subtotal,
        total=subtotal,
        status=Order.STATUS_PLACED,
        notes=notes or '',
    )
    OrderItem.objects.bulk_create([
        OrderItem(
            order=order,
            menu_item_id=line['menu_item_id'],
            name=line['name'],
            price=line['price'],
            qty=line['qty'],
        )
        for line in plan
    ])

    if cart is not None:
        cart.clear()

    return order


def place_order(user, items=None, notes=None):
    """
    Place an order from inline `items` or, when none are given, from the
    user's cart. Returns the created order or raises EmptyCart, ItemNotFound,
    InsufficientStock or OrderPersistenceError. Nothing is written unless the
    whole order succeeds.
    """
    try:
        with transaction.atomic():
            cart = None
            if items:
                plan = _plan_from_items(items)
            else:
                cart = Cart.objects.select_for_update().filter(user=user).first()
                plan = _plan_from_cart(cart) if cart is not None else []

            if not plan:
                raise EmptyCart(user_id=str(user.pk))

            stock = ledger.lock(line['menu_item_id'] for line in plan)
            _validate_stock(plan, stock)
            order = _apply(user, plan, stock, notes, cart)
    except (InsufficientStock, ItemNotFound, EmptyCart) as exc:
        logger.warning(f"Order rejected for user {user.pk}: {exc.detail} {exc.context}")
        raise
    except DatabaseError as exc:
        logger.exception(f"Failed to persist order for user {user.pk}")
        raise OrderPersistenceError() from exc

    logger.info(
        f"Order {order.id} placed by user {user.pk}: "
        f"{len(plan)} item(s), total {order.total}, source {'cart' if cart is not None else 'inline'}"
    )
    return order


# =============== STATUS & CANCELLATION ===============

def _locked_order(order_id):
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFound('Order not found')
    return order


@transaction.atomic
def cancel_order(user, order_id, now=None):
    """
    Cancel the user's own order. Only `placed` orders can be cancelled, and
    only within ORDER_CANCELLATION_WINDOW_SECONDS of creation (inclusive).
    """
    order = _locked_order(order_id)
    if order.user_id != user.pk:
        raise PermissionDenied('Forbidden')

    if order.status != Order.STATUS_PLACED:
        raise OrderNotCancellable(order_id=order.id, status=order.status)

    now = now or timezone.now()
    elapsed = (now - order.created_at).total_seconds()
    window = settings.ORDER_CANCELLATION_WINDOW_SECONDS
    if elapsed > window:
        raise CancellationWindowExpired(
            order_id=order.id, elapsed_seconds=round(elapsed, 3), window_seconds=window
        )

    order.status = Order.STATUS_CANCELLED
    order.save(update_fields=['status', 'updated_at'])

    if settings.ORDER_RESTOCK_ON_CANCEL:
        for item in order.items.filter(menu_item__isnull=False).order_by('menu_item_id'):
            ledger.credit(item.menu_item_id, item.qty)

    logger.info(f"Order {order.id} cancelled by user {user.pk} after {elapsed:.1f}s")
    return order


@transaction.atomic
def update_order_status(order_id, status, actor=None):
    """Staff update; `status` must be one of Order.STATUS_CHOICES"""
    allowed = Order.allowed_statuses()
    if status not in allowed:
        raise InvalidStatusTransition(
            f"status must be one of {', '.join(allowed)}", status=status, allowed=allowed
        )

    order = _locked_order(order_id)
    previous = order.status
    order.status = status
    order.save(update_fields=['status', 'updated_at'])

    actor_id = actor.pk if actor is not None else None
    logger.info(f"Order {order.id} status {previous} -> {status} by {actor_id}")
    return order


# =============== CART ===============

def get_or_create_cart(user):
    cart, _created = Cart.objects.get_or_create(user=user)
    return cart


def _locked_cart(user):
    get_or_create_cart(user)
    return Cart.objects.select_for_update().get(user=user)


def _ensure_cart_total_fits(cart, menu_item_id, price, qty):
    """Reject a line change that would push the cart total past MAX_AMOUNT"""
    others = cart.items.exclude(menu_item_id=menu_item_id)
    total = sum((item.line_total for item in others), line_total(price, qty))
    if total > MAX_AMOUNT:
        raise ValidationError({'qty': [f"Cart total cannot exceed {MAX_AMOUNT}."]})


def _cart_line(cart, menu_item_id):
    line = cart.items.filter(menu_item_id=menu_item_id).first()
    if line is None:
        raise NotFound('Item not in cart')
    return line


@transaction.atomic
def add_cart_item(user, menu_item_id, qty=1):
    """Add `qty` of a menu item, merging into an existing line"""
    if qty < 1:
        raise ValidationError({'qty': ['Ensure this value is greater than or equal to 1.']})
    if qty > MAX_QUANTITY:
        raise ValidationError({'qty': [f"Ensure this value is less than or equal to {MAX_QUANTITY}."]})

    menu_item = MenuItem.objects.filter(pk=menu_item_id).first()
    if menu_item is None:
        raise NotFound('Menu item not found')

    cart = _locked_cart(user)
    line = cart.items.filter(menu_item=menu_item).first()
    if line is not None:
        if line.qty + qty > MAX_QUANTITY:
            raise ValidationError({'qty': [f"Ensure the cart quantity is less than or equal to {MAX_QUANTITY}."]})
        _ensure_cart_total_fits(cart, menu_item.pk, line.price, line.qty + qty)
        line.qty += qty
        line.save(update_fields=['qty'])
    else:
        _ensure_cart_total_fits(cart, menu_item.pk, menu_item.price, qty)
        CartItem.objects.create(
            cart=cart, menu_item=menu_item, name=menu_item.name, price=menu_item.price, qty=qty
        )

    logger.debug(f"Cart of user {user.pk}: added {qty} x item {menu_item.pk}")
    cart.refresh_from_db()
    return cart


@transaction.atomic
def set_cart_item_quantity(user, menu_item_id, qty):
    """Set the quantity of a cart line; zero or less removes it"""
    cart = _locked_cart(user)
    line = _cart_line(cart, menu_item_id)
    if qty <= 0:
        line.delete()
    else:
        if qty > MAX_QUANTITY:
            raise ValidationError({'qty': [f"Ensure this value is less than or equal to {MAX_QUANTITY}."]})
        _ensure_cart_total_fits(cart, menu_item_id, line.price, qty)
        line.qty = qty
        line.save(update_fields=['qty'])

    cart.refresh_from_db()
    return cart


@transaction.atomic
def remove_cart_item(user, menu_item_id):
    cart = _locked_cart(user)
    _cart_line(cart, menu_item_id).delete()
    cart.refresh_from_db()
    return cart


@transaction.atomic
def clear_cart(user):
    cart = _locked_cart(user)
    cart.clear()
    return cart
