"""
Resource handlers.

The server has exactly one: StaticResource, which supplies the bytes sent
after the header block.
"""

from .static import StaticResource

__all__ = ["StaticResource"]
