"""General utility functions"""

from .async_runner import async_runner

__all__ = [
    "async_runner",
]
