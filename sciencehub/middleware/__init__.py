"""Middleware components for the ScienceHub backend."""

from .cors import CORSHeadersMiddleware
from .error_handler import ErrorHandlerMiddleware
from .logging import LoggingMiddleware

__all__ = [
    "CORSHeadersMiddleware",
    "ErrorHandlerMiddleware",
    "LoggingMiddleware",
]
