import pytest

from inventory.models import Category


@pytest.fixture
def menu(make_item, category):
    drinks = Category.objects.create(name='Hot Drinks', sort_order=0)
    return {
        'samosa': make_item('Samosa', '15.00', quantity=5, description='Potato filled pastry'),
        'puff': make_item('Egg Puff', '20.00', quantity=0, description='Flaky pastry with egg'),
        'tea': make_item('Masala Tea', '10.50', quantity=3, item_category=drinks, description='Spiced tea'),
        'coffee': make_item('Filter Coffee', '18.00', quantity=3, item_category=drinks),
    }


def names(response):
    return [item['name'] for item in response.json()['results']]


class TestCategories:
    def test_sorted_by_sort_order_then_name(self, api_client, menu):
        Category.objects.create(name='Beverages', sort_order=0)

        response = api_client.get('/api/v1/categories/')

        assert response.status_code == 200
        assert [c['name'] for c in response.json()] == ['Beverages', 'Hot Drinks', 'Snacks']

    def test_slug_is_derived_from_name(self, db):
        assert Category.objects.create(name='South Indian Meals').slug == 'south-indian-meals'


class TestMenu:
    def test_public_and_sorted_by_name(self, api_client, menu):
        response = api_client.get('/api/v1/menu/')

        assert response.status_code == 200
        assert response.json()['count'] == 4
        assert names(response) == ['Egg Puff', 'Filter Coffee', 'Masala Tea', 'Samosa']
        assert response.json()['results'][0]['category']['slug'] == 'snacks'

    def test_search_name_and_description(self, api_client, menu):
        assert names(api_client.get('/api/v1/menu/', {'q': 'pastry'})) == ['Egg Puff', 'Samosa']
        assert names(api_client.get('/api/v1/menu/', {'q': 'coffee'})) == ['Filter Coffee']

    def test_category_by_slug_or_id(self, api_client, menu):
        drinks = menu['tea'].category
        assert names(api_client.get('/api/v1/menu/', {'category': 'hot-drinks'})) == ['Filter Coffee', 'Masala Tea']
        assert names(api_client.get('/api/v1/menu/', {'category': str(drinks.pk)})) == ['Filter Coffee', 'Masala Tea']

    def test_unknown_category_slug_is_empty(self, api_client, menu):
        response = api_client.get('/api/v1/menu/', {'category': 'desserts'})
        assert response.status_code == 200
        assert response.json()['count'] == 0

    def test_available_filter_follows_stock(self, api_client, menu):
        assert names(api_client.get('/api/v1/menu/', {'available': 'false'})) == ['Egg Puff']
        assert 'Egg Puff' not in names(api_client.get('/api/v1/menu/', {'available': 'true'}))

    def test_ordering_by_price_descending(self, api_client, menu):
        response = api_client.get('/api/v1/menu/', {'ordering': '-price'})
        assert names(response) == ['Egg Puff', 'Filter Coffee', 'Samosa', 'Masala Tea']

    def test_limit_and_page(self, api_client, menu):
        response = api_client.get('/api/v1/menu/', {'limit': 3, 'page': 2})

        assert response.json()['count'] == 4
        assert names(response) == ['Samosa']
        assert response.json()['next'] is None
