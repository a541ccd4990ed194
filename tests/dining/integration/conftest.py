import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from protean.integrations.fastapi import register_exception_handlers


@pytest.fixture()
def client():
    from dining.api import cart_router, maintenance_router, order_router, register_dining_exception_handlers
    from dining.domain import dining

    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with dining.domain_context():
            return await call_next(request)

    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(maintenance_router)
    register_exception_handlers(app)
    register_dining_exception_handlers(app)
    return TestClient(app)
