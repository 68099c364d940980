from decimal import Decimal

import pytest
from django.db import DatabaseError
from rest_framework.exceptions import ValidationError

from inventory.exceptions import InsufficientStock, ItemNotFound
from inventory.models import Inventory, MAX_QUANTITY
from orders import services
from orders.exceptions import EmptyCart, OrderPersistenceError
from orders.models import Cart, Order, OrderItem


def stock_of(menu_item):
    return Inventory.objects.get(menu_item=menu_item).quantity


class TestPlaceFromCart:
    def test_order_debits_stock_and_clears_cart(self, student, samosa):
        services.add_cart_item(student, samosa.pk, 2)

        order = services.place_order(student, notes='no onions')

        assert order.status == Order.STATUS_PLACED
        assert order.subtotal == Decimal('30.00')
        assert order.total == order.subtotal
        assert order.notes == 'no onions'
        assert stock_of(samosa) == 3

        line = order.items.get()
        assert (line.menu_item_id, line.name, line.price, line.qty) == (samosa.pk, 'Samosa', Decimal('15.00'), 2)

        cart = Cart.objects.get(user=student)
        assert not cart.items.exists()
        assert cart.subtotal == Decimal('0.00')

    def test_insufficient_stock_leaves_everything_untouched(self, student, make_item):
        item = make_item('Dosa', '40.00', quantity=2)
        services.add_cart_item(student, item.pk, 3)

        with pytest.raises(InsufficientStock) as excinfo:
            services.place_order(student)

        assert excinfo.value.context['menu_item_id'] == item.pk
        assert str(excinfo.value.detail) == f"Insufficient stock for item {item.pk}"
        assert stock_of(item) == 2
        assert not Order.objects.exists()
        assert Cart.objects.get(user=student).items.get().qty == 3

    def test_missing_cart_is_empty_cart(self, student):
        with pytest.raises(EmptyCart):
            services.place_order(student)

    def test_empty_cart(self, student):
        services.get_or_create_cart(student)
        with pytest.raises(EmptyCart):
            services.place_order(student, items=[])

    def test_cart_snapshot_price_is_charged(self, student, samosa):
        services.add_cart_item(student, samosa.pk, 1)
        samosa.price = Decimal('99.00')
        samosa.save()

        order = services.place_order(student)
        assert order.subtotal == Decimal('15.00')


class TestPlaceInline:
    def test_catalog_price_and_name_are_used(self, student, samosa, tea):
        order = services.place_order(student, items=[
            {'menu_item_id': tea.pk, 'quantity': 1},
            {'menu_item_id': samosa.pk, 'quantity': 3},
        ])

        assert order.subtotal == Decimal('55.50')
        lines = {i.menu_item_id: (i.name, i.price, i.qty) for i in order.items.all()}
        assert lines == {
            samosa.pk: ('Samosa', Decimal('15.00'), 3),
            tea.pk: ('Masala Tea', Decimal('10.50'), 1),
        }

    def test_inline_order_does_not_touch_cart(self, student, samosa, tea):
        services.add_cart_item(student, tea.pk, 1)
        services.place_order(student, items=[{'menu_item_id': samosa.pk, 'quantity': 1}])
        assert Cart.objects.get(user=student).items.count() == 1

    def test_duplicate_lines_are_aggregated(self, student, make_item):
        item = make_item('Idli', '8.00', quantity=4)

        order = services.place_order(student, items=[
            {'menu_item_id': item.pk, 'quantity': 2},
            {'menu_item_id': item.pk, 'quantity': 2},
        ])

        assert order.items.get().qty == 4
        assert stock_of(item) == 0
        item.refresh_from_db()
        assert not item.is_available

    def test_aggregated_quantity_is_validated(self, student, make_item):
        item = make_item('Idli', '8.00', quantity=3)

        with pytest.raises(InsufficientStock):
            services.place_order(student, items=[
                {'menu_item_id': item.pk, 'quantity': 2},
                {'menu_item_id': item.pk, 'quantity': 2},
            ])
        assert stock_of(item) == 3

    def test_aggregated_quantity_past_column_limit_is_insufficient_stock(self, student, make_item):
        water = make_item('Water', '0.00', quantity=MAX_QUANTITY)

        with pytest.raises(InsufficientStock):
            services.place_order(student, items=[
                {'menu_item_id': water.pk, 'quantity': MAX_QUANTITY},
                {'menu_item_id': water.pk, 'quantity': 1},
            ])
        assert stock_of(water) == MAX_QUANTITY

    def test_total_past_amount_limit_is_rejected(self, student, make_item):
        item = make_item('Thali', '1000.00', quantity=200_000)

        with pytest.raises(ValidationError):
            services.place_order(student, items=[{'menu_item_id': item.pk, 'quantity': 100_000}])
        assert stock_of(item) == 200_000
        assert not Order.objects.exists()

    def test_one_short_item_rejects_whole_order(self, student, samosa, tea):
        with pytest.raises(InsufficientStock) as excinfo:
            services.place_order(student, items=[
                {'menu_item_id': samosa.pk, 'quantity': 2},
                {'menu_item_id': tea.pk, 'quantity': 2},
            ])

        assert excinfo.value.menu_item_id == tea.pk
        assert stock_of(samosa) == 5
        assert stock_of(tea) == 1
        assert not Order.objects.exists()

    def test_item_without_inventory_is_insufficient_stock(self, student, make_item):
        item = make_item('Vada', '12.00')
        with pytest.raises(InsufficientStock) as excinfo:
            services.place_order(student, items=[{'menu_item_id': item.pk, 'quantity': 1}])
        assert excinfo.value.context['available'] == 0

    def test_unknown_menu_item(self, student, samosa):
        with pytest.raises(ItemNotFound):
            services.place_order(student, items=[
                {'menu_item_id': samosa.pk, 'quantity': 1},
                {'menu_item_id': 999999, 'quantity': 1},
            ])
        assert stock_of(samosa) == 5


class TestExhaustion:
    def test_sequential_orders_never_oversell(self, student, other_student, samosa):
        placed = 0
        for user in (student, other_student, student):
            try:
                services.place_order(user, items=[{'menu_item_id': samosa.pk, 'quantity': 2}])
                placed += 2
            except InsufficientStock:
                pass

        assert placed == 4
        assert stock_of(samosa) == 1
        assert Order.objects.count() == 2


class TestPersistenceFailure:
    def test_database_error_rolls_back_debits(self, student, samosa, monkeypatch):
        services.add_cart_item(student, samosa.pk, 2)

        def broken_bulk_create(*args, **kwargs):
            raise DatabaseError('disk full')

        monkeypatch.setattr(OrderItem.objects, 'bulk_create', broken_bulk_create)

        with pytest.raises(OrderPersistenceError):
            services.place_order(student)

        assert stock_of(samosa) == 5
        assert not Order.objects.exists()
        assert Cart.objects.get(user=student).items.get().qty == 2


class TestPlaceOrderApi:
    def test_created(self, student_client, samosa):
        response = student_client.post(
            '/api/v1/orders/',
            {'items': [{'menu_item_id': samosa.pk, 'quantity': 2, 'price': '0.01'}], 'notes': 'quick'},
            format='json',
        )

        assert response.status_code == 201
        body = response.json()
        assert body['status'] == 'placed'
        assert body['subtotal'] == '30.00'
        assert body['items'][0]['price'] == '15.00'
        assert body['items'][0]['qty'] == 2

    def test_insufficient_stock_envelope(self, student_client, tea):
        response = student_client.post(
            '/api/v1/orders/', {'items': [{'menu_item_id': tea.pk, 'quantity': 5}]}, format='json'
        )

        assert response.status_code == 400
        body = response.json()
        assert body['error'] is True
        assert body['code'] == 'insufficient_stock'
        assert body['message'] == f"Insufficient stock for item {tea.pk}"
        assert body['details'] == {'menu_item_id': tea.pk, 'requested': 5, 'available': 1}

    def test_empty_cart_envelope(self, student_client):
        response = student_client.post('/api/v1/orders/', {}, format='json')
        assert response.status_code == 400
        assert response.json()['code'] == 'empty_cart'
        assert response.json()['message'] == 'Cart is empty'

    def test_zero_quantity_is_validation_error(self, student_client, samosa):
        response = student_client.post(
            '/api/v1/orders/', {'items': [{'menu_item_id': samosa.pk, 'quantity': 0}]}, format='json'
        )
        assert response.status_code == 400
        assert response.json()['message'] == 'Validation error'

    def test_oversized_line_values_are_validation_errors(self, student_client, samosa):
        for line in ({'menu_item_id': 10 ** 20, 'quantity': 1}, {'menu_item_id': samosa.pk, 'quantity': 10 ** 20}):
            response = student_client.post('/api/v1/orders/', {'items': [line]}, format='json')
            assert response.status_code == 400
            assert response.json()['message'] == 'Validation error'

        assert stock_of(samosa) == 5
        assert not Order.objects.exists()

    def test_oversized_order_id_is_not_found(self, student_client, db):
        assert student_client.get(f'/api/v1/orders/{10 ** 20}/').status_code == 404
        assert student_client.patch(f'/api/v1/orders/{10 ** 20}/cancel/').status_code == 404

    def test_requires_authentication(self, api_client):
        response = api_client.post('/api/v1/orders/', {}, format='json')
        assert response.status_code == 401

    def test_list_my_orders_newest_first(self, student_client, student, other_student, samosa):
        first = services.place_order(student, items=[{'menu_item_id': samosa.pk, 'quantity': 1}])
        second = services.place_order(student, items=[{'menu_item_id': samosa.pk, 'quantity': 1}])
        services.place_order(other_student, items=[{'menu_item_id': samosa.pk, 'quantity': 1}])

        response = student_client.get('/api/v1/orders/')

        assert response.status_code == 200
        assert response.json()['count'] == 2
        assert [o['id'] for o in response.json()['results']] == [second.pk, first.pk]

    def test_other_users_order_is_forbidden(self, client_for, student, other_student, samosa):
        order = services.place_order(student, items=[{'menu_item_id': samosa.pk, 'quantity': 1}])

        assert client_for(student).get(f'/api/v1/orders/{order.pk}/').status_code == 200
        response = client_for(other_student).get(f'/api/v1/orders/{order.pk}/')
        assert response.status_code == 403
        assert response.json()['message'] == 'Forbidden'
