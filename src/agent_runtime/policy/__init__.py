"""
Policy Engine for agent tool calls.

Decides, per call, whether an agent may invoke a tool, whether a human
must approve it first, or whether it is denied outright.
"""

from .engine import PolicyEngine

__all__ = ["PolicyEngine"]
