"""Storefront FastAPI application.

The app is built by a factory so that importing this module never initializes
the domain (domain initialization itself imports every module in the
package).

Usage:
    uvicorn storefront.app:create_app --factory --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.api import cart_router, customer_order_router, order_router, shipping_router
from storefront.services import build_services


def create_app(domain=None) -> FastAPI:
    """Build the API around an initialized domain.

    With no domain given, the storefront domain is imported and initialized
    here; PROTEAN_ENV controls which config overlay applies.
    """
    if domain is None:
        from storefront.domain import storefront

        storefront.init()
        domain = storefront

    app = FastAPI(
        title="Storefront API",
        description="Cart, checkout and shipping",
    )
    app.state.domain = domain
    app.state.services = build_services(domain)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context for each request."""
        with domain.domain_context():
            response = await call_next(request)
        return response

    register_exception_handlers(app)

    app.include_router(cart_router)
    app.include_router(customer_order_router)
    app.include_router(order_router)
    app.include_router(shipping_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": domain.name})

    return app
