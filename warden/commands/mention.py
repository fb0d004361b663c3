"""Text commands addressed to the bot by mention."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from ..services.auto_actions import AutoActionPipeline
from ..services.conversations import ConversationService
from ..utils.response_style import (
    ResponseStyle,
    list_style_options,
    parse_response_style,
    style_label,
)

logger = logging.getLogger(__name__)

_HELP_RE = re.compile(r"^(help|aide|commands?|commandes?)$")
_RESET_RE = re.compile(r"^(reset|clear|forget|oublie|oublier|efface)$")
_STATS_RE = re.compile(r"^(stats?|status|etat|état)$")
_STYLE_RE = re.compile(r"^(?:mode|style|ton|format)\b\s*[:\-]?\s*(.*)$", re.IGNORECASE)


@dataclass(frozen=True)
class MentionCommand:
    name: str  # help, reset, stats or style
    style: Optional[ResponseStyle] = None


def parse_command(text: str) -> Optional[MentionCommand]:
    trimmed = text.strip()
    if not trimmed:
        return None

    normalized = trimmed.lower()
    if _HELP_RE.match(normalized):
        return MentionCommand("help")
    if _RESET_RE.match(normalized):
        return MentionCommand("reset")
    if _STATS_RE.match(normalized):
        return MentionCommand("stats")

    style_match = _STYLE_RE.match(trimmed)
    if style_match:
        value = style_match.group(1)
        return MentionCommand("style", parse_response_style(value) if value else None)

    return None


def build_help_message(pipeline: AutoActionPipeline, every_n_messages: int) -> str:
    if pipeline.enabled:
        auto_info = (
            f"- Auto actions: internal summary + actions every {every_n_messages} "
            "messages (per channel)."
        )
    else:
        auto_info = "- Auto actions: disabled (AUTO_ACTION_EVERY_N_MESSAGES=0)."

    return "\n".join(
        [
            "Usage:",
            "- Mention me with your question to get an answer.",
            "- Commands: help, reset, stats, style <value>.",
            f"- Available styles: {list_style_options()}.",
            auto_info,
        ]
    )


def run_command(
    command: MentionCommand,
    channel_id: int,
    conversations: ConversationService,
    pipeline: AutoActionPipeline,
    every_n_messages: int,
) -> str:
    """Apply ``command`` and return the reply text."""

    if command.name == "help":
        return build_help_message(pipeline, every_n_messages)

    if command.name == "reset":
        conversations.reset(channel_id)
        pipeline.reset(channel_id)
        logger.info("Channel %s state reset on request", channel_id)
        return "Channel memory reset."

    if command.name == "stats":
        stats = conversations.memory.stats(channel_id)
        style = conversations.settings.get_style(channel_id)
        return (
            f"Memory: {stats.count}/{stats.max} messages (~{stats.chars} characters). "
            f"Style: {style_label(style)}."
        )

    if command.style is None:
        return f'Pick a style: {list_style_options()}. Example: "style concise".'
    conversations.settings.set_style(channel_id, command.style)
    return f"Style updated: {style_label(command.style)}."
