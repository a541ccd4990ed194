"""Periodic cart expiry runner.

Runs the abandoned-cart sweep on a fixed interval in a single process. Only one
instance should run at a time; a sweep is safe to repeat, so a restart or an
overlapping manual trigger through the maintenance endpoint does no harm.

Usage:
    python src/reaper.py                 # sweep every DINING_REAPER_INTERVAL_SECONDS
    python src/reaper.py --once          # single sweep, then exit
    python src/reaper.py --interval 60   # override the interval
"""

import argparse
import asyncio

import structlog

logger = structlog.get_logger(__name__)


def _get_domain():
    from dining.domain import dining

    dining.init()
    return dining


def sweep(domain) -> int:
    from dining.cart.expiry import ExpireAbandonedCarts

    with domain.domain_context():
        return domain.process(ExpireAbandonedCarts(), asynchronous=False)


async def run(interval_seconds: int, once: bool = False, max_sweeps: int | None = None):
    """Sweep every ``interval_seconds`` until cancelled.

    A failed sweep is logged and the loop carries on with the next one.
    ``max_sweeps`` bounds the number of attempts.
    """
    domain = _get_domain()
    sweeps = 0
    deleted = None
    while True:
        sweeps += 1
        try:
            deleted = await asyncio.to_thread(sweep, domain)
        except Exception:  # noqa: BLE001 - one failed sweep never stops the reaper
            logger.exception("Cart sweep failed", sweep=sweeps, next_run_in=None if once else interval_seconds)
        else:
            logger.info("Cart sweep completed", deleted=deleted, next_run_in=None if once else interval_seconds)
        if once or (max_sweeps is not None and sweeps >= max_sweeps):
            return deleted
        await asyncio.sleep(interval_seconds)


def main():
    from dining.config import get_settings
    from dining.utils.logging import configure_logging

    parser = argparse.ArgumentParser(description="FeastFlow abandoned cart reaper")
    parser.add_argument("--once", action="store_true", help="Run a single sweep and exit")
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Seconds between sweeps (default: DINING_REAPER_INTERVAL_SECONDS)",
    )
    args = parser.parse_args()

    configure_logging()
    interval = args.interval or get_settings().reaper_interval_seconds
    asyncio.run(run(interval, once=args.once))


if __name__ == "__main__":
    main()
