"""ASGI middleware stack."""
