"""Shared fixtures: a scripted LLM and Discord object mocks."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from warden.models.actions import ChatMessage
from warden.services.llm import LLMUnavailable

Scripted = Union[str, BaseException, None]


class FakeLLM:
    """Stands in for ``LLMClient``; answers by prompt kind."""

    def __init__(
        self,
        plan: Scripted = None,
        decision: Scripted = None,
        emoji: Scripted = None,
        reply: Scripted = None,
    ):
        self.responses: Dict[str, Scripted] = {
            "plan": plan,
            "decision": decision,
            "emoji": emoji,
            "reply": reply,
        }
        self.calls: List[Dict[str, Any]] = []

    def is_configured(self) -> bool:
        return True

    @staticmethod
    def _kind(system_instruction: str) -> str:
        if "action engine" in system_instruction:
            return "plan"
        if "decide whether" in system_instruction:
            return "decision"
        if "emoji reaction" in system_instruction:
            return "emoji"
        return "reply"

    def _answer(self, kind: str) -> str:
        response = self.responses[kind]
        if isinstance(response, BaseException):
            raise response
        if response is None:
            raise LLMUnavailable("not scripted")
        return response

    async def generate(self, system_instruction: str, payload: Any, max_tokens: int = 800) -> str:
        kind = self._kind(system_instruction)
        self.calls.append({"kind": kind, "payload": payload})
        return self._answer(kind)

    async def reply(
        self, system_instruction: str, history: Any, user_text: str, max_tokens: int = 1500
    ) -> str:
        self.calls.append(
            {"kind": "reply", "system": system_instruction, "history": list(history), "text": user_text}
        )
        return self._answer("reply")

    def kinds(self) -> List[str]:
        return [call["kind"] for call in self.calls]


def http_error(cls: type, status: int, reason: str) -> discord.HTTPException:
    response = MagicMock()
    response.status = status
    response.reason = reason
    return cls(response, reason)


def make_member(user_id: int, *, bot: bool = False, admin: bool = False, moderator: bool = False):
    member = MagicMock()
    member.id = user_id
    member.bot = bot
    member.guild_permissions.administrator = admin
    member.guild_permissions.moderate_members = moderator
    member.timeout = AsyncMock()
    return member


def make_channel(channel_id: int = 100, name: str = "general"):
    channel = MagicMock()
    channel.id = channel_id
    channel.name = name
    channel.send = AsyncMock()
    target = MagicMock()
    target.add_reaction = AsyncMock()
    channel.fetch_message = AsyncMock(return_value=target)
    return channel


def make_guild(members: Optional[Dict[int, Any]] = None, guild_id: int = 1):
    members = members or {}
    guild = MagicMock()
    guild.id = guild_id
    guild.get_member = MagicMock(side_effect=lambda member_id: members.get(member_id))
    guild.fetch_member = AsyncMock(side_effect=http_error(discord.NotFound, 404, "Unknown Member"))
    return guild


def make_bot(user_id: int = 999):
    bot = MagicMock()
    bot.user.id = user_id
    return bot


def chat(message_id: str, author_id: str, content: str = "hello", author_name: str = "") -> ChatMessage:
    return ChatMessage(
        id=message_id,
        author_id=author_id,
        author_name=author_name or f"user{author_id}",
        content=content,
    )


@pytest.fixture
def channel():
    return make_channel()


@pytest.fixture
def bot():
    return make_bot()
