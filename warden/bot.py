"""Discord bot wiring for Warden."""

from __future__ import annotations

import contextlib
import logging
from typing import Any

import discord
from discord.ext import commands

from .commands import parse_command, run_command
from .models.actions import ChatMessage
from .models.config import BotSettings
from .services.auto_actions import AutoActionPipeline
from .services.conversations import (
    ChannelMemory,
    ChannelSettings,
    ConversationService,
    Cooldown,
    safe_reply,
)
from .services.llm import LLMClient
from .utils.discord import build_user_text, display_name, strip_bot_mention
from .utils.response_style import ResponseStyle, parse_response_style

logger = logging.getLogger(__name__)


class MessageRouter:
    """Single entry-point for guild messages."""

    def __init__(
        self,
        bot: Any,
        settings: BotSettings,
        conversations: ConversationService,
        pipeline: AutoActionPipeline,
    ):
        self._bot = bot
        self._settings = settings
        self.conversations = conversations
        self.pipeline = pipeline

    async def on_message(self, message: discord.Message) -> None:
        if message.guild is None or message.author.bot:
            return
        me = self._bot.user
        if me is None:
            return

        channel_id = message.channel.id
        mentioned = me in message.mentions
        raw = message.content or ""
        cleaned = strip_bot_mention(raw, me.id) if mentioned else raw.strip()
        user_text = build_user_text(message, cleaned)

        if not user_text:
            if mentioned:
                await self._reply_command_help(message)
            return

        author_name = display_name(message)
        self.pipeline.ingest(
            message.channel,
            message.guild,
            ChatMessage(
                id=str(message.id),
                author_id=str(message.author.id),
                author_name=author_name,
                content=user_text,
            ),
        )

        if not mentioned:
            self.conversations.record(channel_id, author_name, user_text)
            return

        command = parse_command(cleaned)
        if command is not None:
            reply = run_command(
                command,
                channel_id,
                self.conversations,
                self.pipeline,
                self._settings.auto_action_every_n_messages,
            )
            await safe_reply(message, reply)
            return

        wait = self.conversations.cooldown.remaining(message.author.id)
        if wait > 0:
            await safe_reply(message, f"Wait {int(wait) + 1}s before asking again.")
            return

        async with contextlib.AsyncExitStack() as stack:
            try:
                await stack.enter_async_context(message.channel.typing())
            except discord.HTTPException:
                logger.warning("Typing indicator failed in channel %s", channel_id)
            answer = await self.conversations.answer(channel_id, author_name, user_text)
        await safe_reply(message, answer)

    async def _reply_command_help(self, message: discord.Message) -> None:
        command = parse_command("help")
        reply = run_command(
            command,
            message.channel.id,
            self.conversations,
            self.pipeline,
            self._settings.auto_action_every_n_messages,
        )
        await safe_reply(message, reply)


def build_conversations(llm: LLMClient, settings: BotSettings) -> ConversationService:
    default_style = parse_response_style(settings.default_response_style) or ResponseStyle.NORMAL
    return ConversationService(
        llm,
        ChannelMemory(settings.context_messages),
        ChannelSettings(default_style),
        Cooldown(settings.user_cooldown_seconds),
    )


def create_bot(settings: BotSettings, llm: LLMClient) -> commands.Bot:
    intents = discord.Intents.default()
    intents.members = True
    intents.message_content = True

    # Mention commands only - the prefix is required by discord.py but unused
    bot = commands.Bot(
        command_prefix=commands.when_mentioned,
        intents=intents,
        help_command=None,
        allowed_mentions=discord.AllowedMentions(everyone=False, roles=False, users=True),
    )

    pipeline = AutoActionPipeline.from_settings(bot, llm, settings)
    router = MessageRouter(bot, settings, build_conversations(llm, settings), pipeline)
    bot.router = router  # type: ignore[attr-defined]

    @bot.event
    async def on_ready() -> None:
        logger.info("Logged in as %s", bot.user)
        if settings.auto_actions_enabled:
            logger.info(
                "Auto actions every %d messages (window=%d, max_actions=%d)",
                settings.auto_action_every_n_messages,
                settings.window_size,
                settings.auto_action_max_actions,
            )
        else:
            logger.info("Auto actions disabled")

    @bot.event
    async def on_message(message: discord.Message) -> None:
        await router.on_message(message)

    return bot
