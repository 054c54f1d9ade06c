"""Common utilities."""

from .async_http import AsyncHTTPClient
from .files import file_sha1, persist
from .logger import setup_logging

__all__ = ["AsyncHTTPClient", "file_sha1", "persist", "setup_logging"]
