"""Dining bounded context — restaurant carts and food orders.

Handles the per-user shopping cart (single-restaurant scope, line merging,
sliding expiry), checkout into an immutable order snapshot, and the order
status lifecycle with its tracking history.
"""

import structlog
from protean.domain import Domain

dining = Domain(name="dining")

logger = structlog.get_logger(__name__)
