"""Command handling for Warden."""

from .mention import MentionCommand, build_help_message, parse_command, run_command

__all__ = ["MentionCommand", "build_help_message", "parse_command", "run_command"]
