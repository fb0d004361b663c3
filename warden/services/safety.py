"""Whitelist filtering of oracle-proposed actions."""

from __future__ import annotations

import logging
import re
from typing import AbstractSet, Iterable, List, Sequence

from ..models.actions import (
    AddReaction,
    ChatMessage,
    ProposedAction,
    SendMessage,
    TimeoutUser,
    UntimeoutUser,
)

logger = logging.getLogger(__name__)

SUMMARY_REQUEST_PATTERN = re.compile(
    r"\b(r[eé]sum[ée]r?|r[eé]cap(?:itulatif)?|recap|summary|tl;?dr|synth[eè]se)\b",
    re.IGNORECASE,
)
MASS_PING_PATTERN = re.compile(r"@everyone|@here", re.IGNORECASE)
USER_MENTION_PATTERN = re.compile(r"<@!?(\d+)>")


def has_summary_request(messages: Iterable[ChatMessage]) -> bool:
    """True when someone in the window asked for a recap."""

    return any(SUMMARY_REQUEST_PATTERN.search(message.content) for message in messages)


def looks_like_summary(content: str) -> bool:
    return SUMMARY_REQUEST_PATTERN.search(content) is not None


def extract_mention_ids(content: str) -> List[str]:
    return USER_MENTION_PATTERN.findall(content)


def is_message_allowed(
    content: str, allowed_user_ids: AbstractSet[str], summary_requested: bool
) -> bool:
    if not summary_requested and looks_like_summary(content):
        return False
    if MASS_PING_PATTERN.search(content):
        return False
    return all(user_id in allowed_user_ids for user_id in extract_mention_ids(content))


def is_action_allowed(
    action: ProposedAction,
    allowed_message_ids: AbstractSet[str],
    allowed_user_ids: AbstractSet[str],
    summary_requested: bool,
) -> bool:
    if isinstance(action, AddReaction):
        return action.message_id in allowed_message_ids
    if isinstance(action, (TimeoutUser, UntimeoutUser)):
        return action.user_id in allowed_user_ids
    if isinstance(action, SendMessage):
        return is_message_allowed(action.content, allowed_user_ids, summary_requested)
    return False


def filter_actions(
    actions: Sequence[ProposedAction],
    allowed_message_ids: AbstractSet[str],
    allowed_user_ids: AbstractSet[str],
    summary_requested: bool,
) -> List[ProposedAction]:
    """Keep only actions whose targets were present in the observed window.

    Each verdict depends on the action alone, so filtering a single action
    gives the same answer as filtering it inside a larger batch.
    """

    kept: List[ProposedAction] = []
    for action in actions:
        if is_action_allowed(action, allowed_message_ids, allowed_user_ids, summary_requested):
            kept.append(action)
        else:
            logger.debug("Dropped %s action outside the channel whitelist", action.type)
    return kept
