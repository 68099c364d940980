from rest_framework.pagination import PageNumberPagination


class StandardResultsPagination(PageNumberPagination):
    """Page-number pagination driven by ?page= and ?limit="""
    page_size = 12
    page_size_query_param = 'limit'
    max_page_size = 100


class OrderResultsPagination(StandardResultsPagination):
    page_size = 10


class InventoryResultsPagination(StandardResultsPagination):
    page_size = 50
    max_page_size = 200
