"""HTTP mapping for dining errors.

Protean's own exceptions (``ValidationError``, ``ObjectNotFoundError`` …) are
mapped by ``protean.integrations.fastapi.register_exception_handlers``; this
module adds the dining hierarchy on top of it, and reports a version conflict
that outlived the retries as a stale revision.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError

from dining.concurrency import stale_revision_from
from dining.errors import CartNotFound, DiningError, OrderNumberUnavailable, StaleRevisionError
from dining.menu.port import CatalogUnavailableError

_STATUS_BY_ERROR = (
    (CartNotFound, 404),
    (StaleRevisionError, 409),
    (OrderNumberUnavailable, 503),
)


def status_for(exc: DiningError) -> int:
    for error_class, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return status_code
    return 422


def register_dining_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DiningError)
    async def _dining_error(request: Request, exc: DiningError) -> JSONResponse:
        return JSONResponse(status_code=status_for(exc), content=exc.to_dict())

    @app.exception_handler(ExpectedVersionError)
    async def _version_conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
        stale = stale_revision_from(exc)
        return JSONResponse(status_code=status_for(stale), content=stale.to_dict())

    @app.exception_handler(CatalogUnavailableError)
    async def _catalog_unavailable(request: Request, exc: CatalogUnavailableError) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={"error": "catalog_unavailable", "message": str(exc) or "Menu catalog unavailable", "details": {}},
        )
