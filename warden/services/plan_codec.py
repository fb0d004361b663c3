"""Parsing of raw oracle responses into validated plans.

The oracle is asked for a single JSON object but frequently wraps it in prose
or markdown fences. Every parser here slices from the first ``{`` to the last
``}``, decodes, and validates against a strict schema. None of them raise: any
failure degrades to a fallback value.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from ..models.actions import ActionPlan, EmojiChoice, MessageDecision, PlanPayload

logger = logging.getLogger(__name__)


def extract_json_object(text: str) -> Optional[str]:
    first = text.find("{")
    last = text.rfind("}")
    if first < 0 or last < 0 or last <= first:
        return None
    return text[first : last + 1]


def _decode(raw: Optional[str]) -> Optional[Any]:
    if not raw:
        return None
    candidate = extract_json_object(raw)
    if candidate is None:
        return None
    try:
        return json.loads(candidate)
    except (ValueError, RecursionError):
        # Oversized integers and deep nesting fail outside JSONDecodeError.
        logger.debug("Oracle response is not decodable JSON: %.200s", candidate)
        return None


def parse_action_plan(raw: Optional[str], fallback_summary: str, max_actions: int) -> ActionPlan:
    """Decode a plan, falling back to ``{summary: fallback_summary, actions: []}``."""

    fallback = ActionPlan(summary=fallback_summary, actions=[])
    payload = _decode(raw)
    if payload is None:
        return fallback

    try:
        parsed = PlanPayload.model_validate(payload)
    except ValidationError as exc:
        logger.debug("Oracle plan failed validation: %s", exc.errors(include_url=False))
        return fallback

    summary = (parsed.summary or "").strip() or fallback_summary
    actions = list(parsed.actions or [])[: max(0, max_actions)]
    return ActionPlan(summary=summary, actions=actions)


def parse_emoji_choice(raw: Optional[str]) -> Optional[str]:
    payload = _decode(raw)
    if payload is None:
        return None
    try:
        parsed = EmojiChoice.model_validate(payload)
    except ValidationError:
        return None
    return parsed.emoji.strip() or None


def parse_message_decision(raw: Optional[str]) -> Optional[str]:
    """Return the message content when the oracle decided to speak."""

    payload = _decode(raw)
    if payload is None:
        return None
    try:
        parsed = MessageDecision.model_validate(payload)
    except ValidationError:
        return None
    if not parsed.send:
        return None
    return (parsed.content or "").strip() or None
