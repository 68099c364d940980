from authentication.exceptions import BusinessRuleError


class InsufficientStock(BusinessRuleError):
    default_detail = 'Insufficient stock for one or more items'
    default_code = 'insufficient_stock'

    def __init__(self, menu_item_id, requested, available=None):
        super().__init__(
            f"Insufficient stock for item {menu_item_id}",
            menu_item_id=menu_item_id,
            requested=requested,
            available=available,
        )
        self.menu_item_id = menu_item_id


class ItemNotFound(BusinessRuleError):
    default_detail = 'Menu item not found'
    default_code = 'item_not_found'

    def __init__(self, menu_item_id):
        super().__init__(f"Menu item {menu_item_id} not found", menu_item_id=menu_item_id)
        self.menu_item_id = menu_item_id
