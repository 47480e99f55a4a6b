"""Storefront core: cart, checkout with inventory consistency, order history and shipping."""

__version__ = "0.1.0"
