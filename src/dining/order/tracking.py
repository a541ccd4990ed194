"""Live order tracking — courier position updates.

Only ``current_location`` is written here. The tracking history belongs to
status transitions and is never edited from this path.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from dining.domain import dining
from dining.order.order import Order


@dining.command(part_of="Order")
class UpdateCurrentLocation:
    order_id = Identifier(required=True)
    latitude = Float(required=True, min_value=-90.0, max_value=90.0)
    longitude = Float(required=True, min_value=-180.0, max_value=180.0)
    address = String(max_length=255)


@dining.command_handler(part_of=Order)
class OrderTrackingHandler:
    @handle(UpdateCurrentLocation)
    def update_current_location(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_current_location(
            latitude=command.latitude,
            longitude=command.longitude,
            address=command.address,
        )
        repo.add(order)
        return str(order.id)
