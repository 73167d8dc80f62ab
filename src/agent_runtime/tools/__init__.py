"""Tool router and handler registry."""

from .router import ToolRouter

__all__ = ["ToolRouter"]
