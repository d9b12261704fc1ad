"""API module."""

from .sessions import router as sessions_router
from .turns import router as turns_router
from .media import router as media_router
from .errors import register_exception_handlers

__all__ = ['sessions_router', 'turns_router', 'media_router', 'register_exception_handlers']
