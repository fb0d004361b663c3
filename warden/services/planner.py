"""Plan acquisition: oracle calls, safety filtering and fallback augmentation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..models.actions import AddReaction, ProposedAction, SendMessage
from ..utils.prompts import (
    build_auto_action_system_prompt,
    build_message_decision_payload,
    build_message_decision_system_prompt,
    build_plan_payload,
    build_reaction_payload,
    build_reaction_system_prompt,
)
from .llm import LLMClient, LLMUnavailable
from .plan_codec import parse_action_plan, parse_emoji_choice, parse_message_decision
from .safety import filter_actions, has_summary_request
from .window import WindowSnapshot

logger = logging.getLogger(__name__)


@dataclass
class PlannedCycle:
    """Outcome of plan acquisition for one cycle."""

    summary: str
    actions: List[ProposedAction]
    summary_requested: bool = False


class ActionPlanner:
    """Asks the oracle for a plan and turns it into whitelisted actions."""

    def __init__(self, llm: LLMClient, max_actions: int, max_timeout_minutes: int):
        self._llm = llm
        self._max_actions = max(0, max_actions)
        self._max_timeout_minutes = max(1, max_timeout_minutes)

    @property
    def max_actions(self) -> int:
        return self._max_actions

    async def acquire(self, channel_name: str, snapshot: WindowSnapshot) -> PlannedCycle:
        messages = list(snapshot.messages)
        summary_requested = has_summary_request(messages)
        allowed_message_ids = snapshot.message_ids
        allowed_user_ids = snapshot.author_ids

        summary, proposed = await self._request_plan(channel_name, snapshot, summary_requested)
        actions = filter_actions(proposed, allowed_message_ids, allowed_user_ids, summary_requested)
        if len(actions) < len(proposed):
            logger.info(
                "Dropped %d of %d proposed actions in #%s",
                len(proposed) - len(actions),
                len(proposed),
                channel_name,
            )

        has_message = any(isinstance(action, SendMessage) for action in actions)
        if not has_message and len(actions) < self._max_actions:
            content = await self._request_message(channel_name, summary, snapshot)
            if content:
                candidate = SendMessage(content=content)
                if filter_actions(
                    [candidate], allowed_message_ids, allowed_user_ids, summary_requested
                ):
                    actions.append(candidate)
                else:
                    logger.info("Fallback message for #%s rejected by the whitelist", channel_name)

        has_reaction = any(isinstance(action, AddReaction) for action in actions)
        target = snapshot.latest
        if not has_reaction and target is not None and len(actions) < self._max_actions:
            emoji = await self._request_reaction(channel_name, summary, snapshot)
            if emoji:
                actions.append(AddReaction(message_id=target.id, emoji=emoji))

        return PlannedCycle(
            summary=summary,
            actions=actions[: self._max_actions],
            summary_requested=summary_requested,
        )

    async def _request_plan(
        self, channel_name: str, snapshot: WindowSnapshot, summary_requested: bool
    ) -> tuple[str, List[ProposedAction]]:
        system_prompt = build_auto_action_system_prompt(
            self._max_actions, self._max_timeout_minutes
        )
        payload = build_plan_payload(
            channel_name,
            snapshot.summary,
            snapshot.messages,
            self._max_actions,
            self._max_timeout_minutes,
            summary_requested,
        )
        try:
            raw = await self._llm.generate(system_prompt, payload)
        except LLMUnavailable:
            logger.info("LLM unavailable; skipping auto-action plan for #%s", channel_name)
            return snapshot.summary, []
        except Exception:
            logger.exception("Auto-action plan request failed for #%s", channel_name)
            return snapshot.summary, []

        plan = parse_action_plan(raw, snapshot.summary, self._max_actions)
        return plan.summary, list(plan.actions)

    async def _request_message(
        self, channel_name: str, summary: str, snapshot: WindowSnapshot
    ) -> Optional[str]:
        payload = build_message_decision_payload(channel_name, summary, snapshot.messages)
        try:
            raw = await self._llm.generate(build_message_decision_system_prompt(), payload)
        except LLMUnavailable:
            return None
        except Exception:
            logger.exception("Auto message decision failed for #%s", channel_name)
            return None
        return parse_message_decision(raw)

    async def _request_reaction(
        self, channel_name: str, summary: str, snapshot: WindowSnapshot
    ) -> Optional[str]:
        target = snapshot.latest
        if target is None:
            return None
        payload = build_reaction_payload(channel_name, summary, target)
        try:
            raw = await self._llm.generate(build_reaction_system_prompt(), payload, max_tokens=50)
        except LLMUnavailable:
            return None
        except Exception:
            logger.exception("Auto reaction pick failed for #%s", channel_name)
            return None
        return parse_emoji_choice(raw)
