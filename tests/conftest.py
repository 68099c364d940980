from decimal import Decimal
from itertools import count

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.models import CustomUser
from inventory import ledger
from inventory.models import Category, MenuItem

_sequence = count(1)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    def _make_user(role=CustomUser.ROLE_STUDENT, password='secret123', **extra):
        n = next(_sequence)
        fields = {
            'email': f'user{n}@canteen.test',
            'name': f'User {n}',
            'role': role,
            'is_verified': True,
        }
        fields.update(extra)
        return CustomUser.objects.create_user(password=password, **fields)
    return _make_user


@pytest.fixture
def student(make_user):
    return make_user(registration_no='21BCE1001')


@pytest.fixture
def other_student(make_user):
    return make_user(registration_no='21BCE1002')


@pytest.fixture
def staff(make_user):
    return make_user(role=CustomUser.ROLE_STAFF, username='counter1')


@pytest.fixture
def admin_user(make_user):
    return make_user(role=CustomUser.ROLE_ADMIN, username='admin')


@pytest.fixture
def client_for():
    def _client_for(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        refresh['role'] = user.role
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return _client_for


@pytest.fixture
def student_client(client_for, student):
    return client_for(student)


@pytest.fixture
def staff_client(client_for, staff):
    return client_for(staff)


@pytest.fixture
def category(db):
    return Category.objects.create(name='Snacks', sort_order=1)


@pytest.fixture
def make_item(category):
    def _make_item(name, price, quantity=None, item_category=None, **extra):
        menu_item = MenuItem.objects.create(
            name=name,
            price=Decimal(price),
            category=item_category or category,
            **extra
        )
        if quantity is not None:
            ledger.create(menu_item, quantity=quantity, low_stock_threshold=2, unit='pcs')
            menu_item.refresh_from_db()
        return menu_item
    return _make_item


@pytest.fixture
def samosa(make_item):
    return make_item('Samosa', '15.00', quantity=5, description='Potato filled pastry')


@pytest.fixture
def tea(make_item):
    return make_item('Masala Tea', '10.50', quantity=1, description='Spiced milk tea')
