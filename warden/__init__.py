"""Warden: periodic LLM-driven auto-actions for Discord channels."""

from .bot import create_bot

__all__ = ["create_bot"]
