import threading

import pytest
from django.db import connection, connections

from inventory.exceptions import InsufficientStock
from inventory.models import Inventory
from orders import services
from orders.models import Order

pytestmark = [
    pytest.mark.django_db(transaction=True),
    pytest.mark.postgres,
    pytest.mark.skipif(
        connection.vendor != 'postgresql',
        reason='row locks need PostgreSQL: set POSTGRES_DB and run pytest -m postgres',
    ),
]


def test_concurrent_orders_never_oversell(make_user, make_item):
    item = make_item('Biryani', '80.00', quantity=5)
    other = make_item('Lassi', '25.00', quantity=50)
    users = [make_user() for _ in range(8)]
    barrier = threading.Barrier(len(users))
    outcomes = []
    lock = threading.Lock()

    def place(user, reverse):
        lines = [{'menu_item_id': item.pk, 'quantity': 2}, {'menu_item_id': other.pk, 'quantity': 1}]
        if reverse:
            lines.reverse()
        barrier.wait()
        try:
            services.place_order(user, items=lines)
            result = 'placed'
        except InsufficientStock:
            result = 'rejected'
        finally:
            connections.close_all()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=place, args=(user, i % 2)) for i, user in enumerate(users)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    placed = outcomes.count('placed')
    assert placed == 2
    assert outcomes.count('rejected') == len(users) - 2
    assert Inventory.objects.get(menu_item=item).quantity == 1
    assert Inventory.objects.get(menu_item=other).quantity == 50 - placed
    assert Order.objects.count() == placed
