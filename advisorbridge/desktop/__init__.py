"""Desktop-shell command layer."""

from advisorbridge.desktop.commands import COMMANDS, CommandContext, build_command_context, invoke

__all__ = ["COMMANDS", "CommandContext", "build_command_context", "invoke"]
