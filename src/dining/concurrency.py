"""Optimistic concurrency helpers.

Carts and orders rely on Protean's aggregate versioning: every save checks the
stored ``_version`` against the one the aggregate was loaded at and raises
``ExpectedVersionError`` when another writer got there first. The version is
exposed to callers as the aggregate's ``revision``. Commands can pin the
revision they acted on; ``retry_on_conflict`` re-runs an operation that lost
a race and reports a persistent conflict as ``StaleRevisionError``.
"""

from collections.abc import Callable
from typing import TypeVar

import structlog
from protean.exceptions import ExpectedVersionError

from dining.errors import StaleRevisionError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def revision_of(aggregate) -> int:
    """The stored version the aggregate was loaded at."""
    return aggregate._version


def check_expected_revision(aggregate, expected_revision: int | None) -> None:
    """Reject the operation when the caller acted on an older revision."""
    if expected_revision is None:
        return
    stored_revision = revision_of(aggregate)
    if stored_revision != expected_revision:
        raise StaleRevisionError(
            f"{type(aggregate).__name__} was modified concurrently",
            aggregate_id=str(aggregate.id),
            expected_revision=expected_revision,
            stored_revision=stored_revision,
        )


def stale_revision_from(exc: ExpectedVersionError) -> StaleRevisionError:
    return StaleRevisionError("Modified concurrently, reload and try again", reason=str(exc))


def retry_on_conflict(operation: Callable[[], T], attempts: int = 2) -> T:
    """Run ``operation``, re-running it when a concurrent write wins the race.

    ``operation`` must re-read everything it needs, since each attempt starts
    over. Once attempts run out the conflict propagates as ``StaleRevisionError``.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except StaleRevisionError as exc:
            if attempt == attempts:
                raise
            logger.warning("Concurrent write detected, retrying", attempt=attempt, details=exc.details)
        except ExpectedVersionError as exc:
            if attempt == attempts:
                raise stale_revision_from(exc) from exc
            logger.warning("Concurrent write detected, retrying", attempt=attempt, reason=str(exc))
