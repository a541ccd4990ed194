"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from dining.cart.cart import Cart
from dining.concurrency import check_expected_revision
from dining.domain import dining


@dining.command(part_of="Cart")
class AddItemToCart:
    owner_id = Identifier(required=True)
    menu_item_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    restaurant_name = String(max_length=255)
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    quantity = Integer(default=1, min_value=1)
    category = String(required=True, max_length=100)
    customizations = Text()  # JSON list of {name, value, additional_price}
    special_instructions = String(max_length=200)
    preparation_time = Integer(min_value=0)
    is_available = Boolean(default=True)
    delivery_fee = Float(min_value=0.0)
    minimum_order_amount = Float(min_value=0.0)
    expected_revision = Integer()


@dining.command(part_of="Cart")
class UpdateCartItemQuantity:
    owner_id = Identifier(required=True)
    index = Integer(required=True)
    quantity = Integer(required=True)
    expected_revision = Integer()


@dining.command(part_of="Cart")
class RemoveCartItem:
    owner_id = Identifier(required=True)
    index = Integer(required=True)
    expected_revision = Integer()


@dining.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddItemToCart)
    def add_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.owner_id)
        check_expected_revision(cart, command.expected_revision)
        cart.add_item(
            menu_item_id=command.menu_item_id,
            restaurant_id=command.restaurant_id,
            restaurant_name=command.restaurant_name,
            name=command.name,
            description=command.description,
            price=command.price,
            quantity=command.quantity or 1,
            category=command.category,
            customizations=command.customizations,
            special_instructions=command.special_instructions,
            preparation_time=command.preparation_time,
            is_available=command.is_available,
            delivery_fee=command.delivery_fee,
            minimum_order_amount=command.minimum_order_amount,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartItemQuantity)
    def update_item_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.require_for_owner(command.owner_id)
        check_expected_revision(cart, command.expected_revision)
        cart.update_item_quantity(index=command.index, quantity=command.quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveCartItem)
    def remove_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.require_for_owner(command.owner_id)
        check_expected_revision(cart, command.expected_revision)
        cart.remove_item(index=command.index)
        repo.add(cart)
        return str(cart.id)
