"""Command processors for termengine.

Public API:
    CommandProcessor -- Abstract base class of every command
    ChildProcessor -- Function-backed processor for inline subcommands
"""

from termengine.processors.base import ChildProcessor, CommandProcessor

__all__ = ["ChildProcessor", "CommandProcessor"]
