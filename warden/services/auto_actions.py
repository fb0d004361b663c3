"""Periodic auto-action pipeline for guild channels.

Every channel keeps a bounded window of recent messages. Once the configured
number of messages has arrived, a cycle asks the LLM for a plan, filters it
against the ids present in the window and applies the surviving actions.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..models.actions import ChatMessage
from ..models.config import BotSettings
from ..utils.discord import channel_name
from .executor import ActionExecutor
from .llm import LLMClient
from .planner import ActionPlanner, PlannedCycle
from .window import ChannelRegistry, ChannelState

logger = logging.getLogger(__name__)


class AutoActionPipeline:
    """Feeds guild messages into per-channel windows and runs cycles."""

    def __init__(
        self,
        bot: Any,
        llm: LLMClient,
        threshold: int,
        window_size: int,
        max_actions: int,
        max_timeout_minutes: int,
    ):
        self._threshold = max(0, threshold)
        self._planner = ActionPlanner(llm, max_actions, max_timeout_minutes)
        self._executor = ActionExecutor(bot, max_timeout_minutes)
        self._registry = ChannelRegistry(window_size, self._threshold, self._run_cycle)

    @classmethod
    def from_settings(cls, bot: Any, llm: LLMClient, settings: BotSettings) -> "AutoActionPipeline":
        return cls(
            bot,
            llm,
            threshold=settings.auto_action_every_n_messages,
            window_size=settings.window_size,
            max_actions=settings.auto_action_max_actions,
            max_timeout_minutes=settings.auto_action_max_timeout_minutes,
        )

    @property
    def enabled(self) -> bool:
        return self._threshold > 0

    @property
    def registry(self) -> ChannelRegistry:
        return self._registry

    def ingest(self, channel: Any, guild: Any, message: ChatMessage) -> bool:
        """Record a message; returns True when it triggered a cycle."""

        if not self.enabled:
            return False

        state = self._registry.get(channel.id)
        state.channel = channel
        state.guild = guild
        state.window.ingest(message)

        if not state.window.consume_trigger():
            return False
        new_state = state.coalescer.trigger()
        logger.debug("Auto-action trigger in channel %s -> %s", channel.id, new_state.value)
        return True

    def reset(self, channel_id: int) -> bool:
        return self._registry.reset(channel_id)

    def stats(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "channels": len(self._registry),
            "running_cycles": self._registry.running_cycles(),
        }

    async def wait_idle(self, channel_id: int) -> None:
        state = self._registry.peek(channel_id)
        if state is not None and state.coalescer is not None:
            await state.coalescer.wait_idle()

    async def _run_cycle(self, state: ChannelState) -> None:
        epoch = state.epoch
        snapshot = state.window.snapshot()
        channel = state.channel
        name = channel_name(channel)

        planned = await self._planner.acquire(name, snapshot)
        if state.epoch == epoch:
            state.window.update_summary(planned.summary)
        self._log_plan(name, planned)

        if not planned.actions:
            return
        applied = await self._executor.execute(planned.actions, channel, state.guild)
        logger.info(
            "Auto-action cycle in #%s applied %d/%d actions", name, applied, len(planned.actions)
        )

    @staticmethod
    def _log_plan(name: str, planned: PlannedCycle) -> None:
        if not planned.actions:
            logger.debug("Auto-action cycle in #%s produced no actions", name)
            return
        logger.debug(
            "Auto-action plan for #%s (recap requested: %s): %s",
            name,
            planned.summary_requested,
            ", ".join(action.type for action in planned.actions),
        )
