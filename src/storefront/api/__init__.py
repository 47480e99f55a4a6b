from storefront.api.routes import cart_router, customer_order_router, order_router, shipping_router

__all__ = ["cart_router", "customer_order_router", "order_router", "shipping_router"]
