"""Business-rule and concurrency errors raised by the dining domain.

Schema problems (missing fields, out-of-range values, bad enum values) are
reported with Protean's ``ValidationError`` at the field level. The classes here
cover the other two families: violations of cart/order rules, which carry a
stable ``code``, and stale writes detected by the repositories.
"""


class DiningError(Exception):
    """Base class for dining errors that carry a stable reason code."""

    code = "dining_error"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "details": self.details}


class BusinessRuleViolation(DiningError):
    code = "business_rule_violation"


class CrossRestaurantConflict(BusinessRuleViolation):
    code = "cross_restaurant_conflict"


class QuantityLimitExceeded(BusinessRuleViolation):
    code = "quantity_limit_exceeded"


class InvalidIndex(BusinessRuleViolation):
    code = "invalid_index"


class EmptyCart(BusinessRuleViolation):
    code = "empty_cart"


class MinimumOrderNotMet(BusinessRuleViolation):
    code = "minimum_order_not_met"


class ItemsUnavailable(BusinessRuleViolation):
    code = "items_unavailable"


class IllegalTransition(BusinessRuleViolation):
    code = "illegal_transition"


class RatingNotAllowed(BusinessRuleViolation):
    code = "rating_not_allowed"


class CartNotFound(DiningError):
    code = "cart_not_found"


class StaleRevisionError(DiningError):
    """The stored document changed after it was read. Safe to retry."""

    code = "stale_revision"
    retryable = True


class OrderNumberUnavailable(DiningError):
    """No free order number could be drawn within the configured attempts."""

    code = "order_number_unavailable"
    retryable = True
