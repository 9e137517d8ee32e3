"""Tube-Scout Tool System.

Tool interface, envelope and registry.
"""

from tube_tools.base import BaseTool, ToolDescriptor, ToolResponse
from tube_tools.registry import ToolRegistry

__all__ = ["BaseTool", "ToolDescriptor", "ToolResponse", "ToolRegistry"]
