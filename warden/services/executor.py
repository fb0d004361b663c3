"""Application of validated auto-actions to Discord."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Optional, Sequence

import discord

from ..models.actions import AddReaction, ProposedAction, SendMessage, TimeoutUser, UntimeoutUser
from ..utils.discord import send_chunked

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 180
DEFAULT_UNTIMEOUT_REASON = "Automatic untimeout"


def is_protected_member(member: Any) -> bool:
    """Bots and members with admin or moderation rights are never moderated."""

    if member.bot:
        return True
    permissions = member.guild_permissions
    return bool(permissions.administrator or permissions.moderate_members)


def _truncate_reason(reason: Optional[str]) -> Optional[str]:
    cleaned = (reason or "").strip()[:MAX_REASON_LENGTH]
    return cleaned or None


class ActionExecutor:
    """Runs actions in plan order; one failing action never blocks the rest."""

    def __init__(self, bot: Any, max_timeout_minutes: int):
        self._bot = bot
        self._max_timeout_minutes = max(1, max_timeout_minutes)

    async def execute(self, actions: Sequence[ProposedAction], channel: Any, guild: Any) -> int:
        """Apply each action and return how many completed without error."""

        applied = 0
        for action in actions:
            try:
                if await self.apply(action, channel, guild):
                    applied += 1
            except discord.Forbidden:
                logger.warning("Missing permissions for %s in channel %s", action.type, channel.id)
            except Exception:
                logger.exception("Auto action %s failed in channel %s", action.type, channel.id)
        return applied

    async def apply(self, action: ProposedAction, channel: Any, guild: Any) -> bool:
        if isinstance(action, SendMessage):
            return await self._send_message(action, channel)
        if isinstance(action, AddReaction):
            return await self._add_reaction(action, channel)
        if isinstance(action, TimeoutUser):
            return await self._timeout(action, guild)
        if isinstance(action, UntimeoutUser):
            return await self._untimeout(action, guild)
        logger.warning("Unknown auto action type: %s", getattr(action, "type", action))
        return False

    async def _send_message(self, action: SendMessage, channel: Any) -> bool:
        sent = await send_chunked(
            channel,
            action.content,
            allowed_mentions=discord.AllowedMentions(everyone=False, roles=False, users=True),
        )
        return sent > 0

    async def _add_reaction(self, action: AddReaction, channel: Any) -> bool:
        try:
            target = await channel.fetch_message(int(action.message_id))
        except (discord.NotFound, ValueError):
            logger.debug("Reaction target %s no longer exists", action.message_id)
            return False
        await target.add_reaction(action.emoji)
        return True

    async def _timeout(self, action: TimeoutUser, guild: Any) -> bool:
        member = await self._resolve_target(guild, action.user_id)
        if member is None:
            return False
        minutes = min(max(action.minutes, 1), self._max_timeout_minutes)
        await member.timeout(timedelta(minutes=minutes), reason=_truncate_reason(action.reason))
        logger.info("Timed out %s for %s minutes in guild %s", member.id, minutes, guild.id)
        return True

    async def _untimeout(self, action: UntimeoutUser, guild: Any) -> bool:
        member = await self._resolve_target(guild, action.user_id)
        if member is None:
            return False
        reason = _truncate_reason(action.reason) or DEFAULT_UNTIMEOUT_REASON
        await member.timeout(None, reason=reason)
        logger.info("Removed timeout for %s in guild %s", member.id, guild.id)
        return True

    async def _resolve_target(self, guild: Any, user_id: str) -> Optional[Any]:
        try:
            member_id = int(user_id)
        except ValueError:
            return None

        me = self._bot.user
        if me is not None and me.id == member_id:
            logger.debug("Refusing to moderate the bot itself")
            return None

        member = guild.get_member(member_id)
        if member is None:
            try:
                member = await guild.fetch_member(member_id)
            except (discord.NotFound, discord.HTTPException):
                logger.info("Could not find member %s in guild %s", user_id, guild.id)
                return None

        if is_protected_member(member):
            logger.info("Skipping protected member %s in guild %s", member.id, guild.id)
            return None
        return member
