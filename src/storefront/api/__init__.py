"""Storefront HTTP API: product and review routers."""
