"""FeastFlow FastAPI application.

Web server for the dining domain: carts, checkout and order tracking. Commands
are processed synchronously inside a dining domain context pushed per request.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from dining/domain.toml.
from dining.domain import dining
from dining.utils.logging import configure_logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

configure_logging()
dining.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="FeastFlow API",
    description="Food ordering — carts, checkout and order tracking",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the dining domain context for every request."""
    with dining.domain_context():
        return await call_next(request)


# ---------------------------------------------------------------------------
# Routers and error mapping
# ---------------------------------------------------------------------------
from dining.api import (  # noqa: E402
    cart_router,
    maintenance_router,
    order_router,
    register_dining_exception_handlers,
)

app.include_router(cart_router)
app.include_router(order_router)
app.include_router(maintenance_router)

register_exception_handlers(app)
register_dining_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": dining.name})
