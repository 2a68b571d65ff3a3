"""Terminal front end for Trade Winds."""

from .commands import CommandHandler, CommandResult

__all__ = ["CommandHandler", "CommandResult"]
