"""HTTP routers for the PayLite backend."""

from .router import build_router

__all__ = ["build_router"]
