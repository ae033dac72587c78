"""API layer: dependency providers, error handling, and routers."""

from costar.api.errors import handle_endpoint_error, register_exception_handlers

__all__ = ["handle_endpoint_error", "register_exception_handlers"]
