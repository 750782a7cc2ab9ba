"""Ordering service FastAPI application.

Processes orders, carts and catalog seeding synchronously over HTTP. Every
request runs inside the ordering domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from ordering/domain.toml.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.domain import ordering  # noqa: E402
from ordering.utils.logging import add_context, clear_context  # noqa: E402

ordering.init()

from ordering.api import cart_router, order_router, product_router, register_error_handlers  # noqa: E402

_UNSCOPED_PATHS = ("/health", "/docs", "/openapi.json", "/redoc")


def create_app(domain=ordering) -> FastAPI:
    app = FastAPI(
        title="Ordering API",
        description="Storefront ordering — catalog stock, carts and order placement",
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
        """Push the ordering domain context for each API request."""
        if request.url.path.startswith(_UNSCOPED_PATHS):
            return await call_next(request)
        clear_context()
        add_context(method=request.method, path=request.url.path)
        with domain.domain_context():
            return await call_next(request)

    app.include_router(order_router)
    app.include_router(cart_router)
    app.include_router(product_router)
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": domain.name})

    return app


app = create_app()
