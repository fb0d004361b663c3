"""Rolling channel memory and mention replies."""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List

import discord

from ..utils.discord import send_chunked
from ..utils.prompts import build_chat_system_prompt
from ..utils.response_style import ResponseStyle, style_instruction
from .llm import LLMClient, LLMUnavailable

logger = logging.getLogger(__name__)

FAILURE_REPLY = "Sorry, I could not generate an answer. Try again in a few seconds."
EMPTY_REPLY = "I could not come up with an answer. Could you rephrase your question?"


@dataclass(frozen=True)
class ChatTurn:
    role: str  # "user" or "assistant"
    text: str

    def as_dict(self) -> Dict[str, str]:
        return {"role": self.role, "text": self.text}


@dataclass(frozen=True)
class MemoryStats:
    count: int
    max: int
    chars: int


class ChannelMemory:
    """Most recent conversation turns per channel."""

    def __init__(self, max_messages: int):
        self._max_messages = max_messages
        self._by_channel: Dict[int, Deque[ChatTurn]] = {}

    def history(self, channel_id: int) -> List[ChatTurn]:
        return list(self._by_channel.get(channel_id, ()))

    def push(self, channel_id: int, turn: ChatTurn) -> None:
        turns = self._by_channel.setdefault(channel_id, deque(maxlen=self._max_messages))
        turns.append(turn)

    def stats(self, channel_id: int) -> MemoryStats:
        turns = self._by_channel.get(channel_id, ())
        return MemoryStats(
            count=len(turns),
            max=self._max_messages,
            chars=sum(len(turn.text) for turn in turns),
        )

    def clear(self, channel_id: int) -> None:
        self._by_channel.pop(channel_id, None)


class ChannelSettings:
    """Per-channel response style overrides."""

    def __init__(self, default_style: ResponseStyle):
        self._default_style = default_style
        self._styles: Dict[int, ResponseStyle] = {}

    def get_style(self, channel_id: int) -> ResponseStyle:
        return self._styles.get(channel_id, self._default_style)

    def set_style(self, channel_id: int, style: ResponseStyle) -> None:
        self._styles[channel_id] = style

    def clear(self, channel_id: int) -> None:
        self._styles.pop(channel_id, None)


class Cooldown:
    """Per-user rate limit for mention replies."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._seconds = max(0.0, seconds)
        self._clock = clock
        self._last_request: Dict[int, float] = {}

    def remaining(self, user_id: int) -> float:
        """Seconds left before ``user_id`` may ask again; records the request when 0."""

        if self._seconds <= 0:
            return 0.0
        now = self._clock()
        last = self._last_request.get(user_id)
        if last is not None and now - last < self._seconds:
            return self._seconds - (now - last)
        self._last_request[user_id] = now
        return 0.0


class ConversationService:
    """Answers mentions using the channel's rolling memory."""

    def __init__(
        self,
        llm: LLMClient,
        memory: ChannelMemory,
        settings: ChannelSettings,
        cooldown: Cooldown,
    ):
        self._llm = llm
        self.memory = memory
        self.settings = settings
        self.cooldown = cooldown

    def record(self, channel_id: int, author_name: str, text: str) -> None:
        self.memory.push(channel_id, ChatTurn("user", f"{author_name}: {text}"))

    async def answer(self, channel_id: int, author_name: str, text: str) -> str:
        """Generate a reply and store both turns in memory."""

        history = [turn.as_dict() for turn in self.memory.history(channel_id)]
        user_turn = f"{author_name}: {text}"
        self.memory.push(channel_id, ChatTurn("user", user_turn))

        style = self.settings.get_style(channel_id)
        system_prompt = build_chat_system_prompt(style_instruction(style))
        try:
            answer = await self._llm.reply(system_prompt, history, user_turn)
        except LLMUnavailable:
            logger.info("LLM unavailable; cannot answer mention in channel %s", channel_id)
            answer = FAILURE_REPLY
        except Exception:
            logger.exception("LLM reply failed in channel %s", channel_id)
            answer = FAILURE_REPLY

        if not answer.strip():
            answer = EMPTY_REPLY

        self.memory.push(channel_id, ChatTurn("assistant", answer))
        return answer

    def reset(self, channel_id: int) -> None:
        self.memory.clear(channel_id)
        self.settings.clear(channel_id)


async def safe_reply(message: discord.Message, content: str) -> None:
    """Reply to ``message``; fall back to a plain channel send with a mention."""

    user_mentions = discord.AllowedMentions(everyone=False, roles=False, users=True)
    try:
        await send_chunked(
            message.channel, content, allowed_mentions=user_mentions, reference=message
        )
        return
    except discord.HTTPException:
        logger.warning("Failed to reply to message %s, falling back to send", message.id)

    author_only = discord.AllowedMentions(
        everyone=False, roles=False, users=[message.author]
    )
    try:
        await send_chunked(
            message.channel, f"{message.author.mention} {content}", allowed_mentions=author_only
        )
    except discord.HTTPException:
        logger.exception("Failed to send fallback reply in channel %s", message.channel.id)
