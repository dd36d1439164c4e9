from .base import invoke
from .http import create_app
from .stdio import StdioBinding

__all__ = ["invoke", "create_app", "StdioBinding"]
