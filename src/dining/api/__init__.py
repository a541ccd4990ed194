from dining.api.errors import register_dining_exception_handlers
from dining.api.routes import cart_router, maintenance_router, order_router

__all__ = ["cart_router", "order_router", "maintenance_router", "register_dining_exception_handlers"]
