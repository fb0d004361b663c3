"""Discord-specific utility functions."""

from __future__ import annotations

import re
from typing import Any, List, Optional

import discord

# Discord's maximum message length
DISCORD_MAX_MESSAGE_LENGTH = 2000


def split_message(content: str, max_length: int = DISCORD_MAX_MESSAGE_LENGTH) -> List[str]:
    """Split a message into chunks that fit within Discord's character limit.

    Splits at natural boundaries (newlines, then sentences, then words) and
    only falls back to a hard cut when none lies past the halfway point.

    Examples:
        >>> split_message("Short message")
        ['Short message']
        >>> all(len(chunk) <= 2000 for chunk in split_message("a" * 3000))
        True
    """
    if len(content) <= max_length:
        return [content]

    chunks: List[str] = []
    remaining = content

    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining)
            break

        split_point = max_length

        # Paragraph boundary, only if past the halfway point
        newline_pos = remaining.rfind("\n", 0, max_length)
        if newline_pos > max_length * 0.5:
            split_point = newline_pos + 1

        # Sentence boundary
        elif "." in remaining[:max_length]:
            for i in range(max_length - 1, int(max_length * 0.5), -1):
                if remaining[i] == "." and (i + 1 >= len(remaining) or remaining[i + 1] in " \n"):
                    split_point = i + 1
                    break

        # Word boundary
        else:
            space_pos = remaining.rfind(" ", 0, max_length)
            if space_pos > max_length * 0.5:
                split_point = space_pos + 1

        chunk = remaining[:split_point].rstrip()
        if chunk:
            chunks.append(chunk)

        remaining = remaining[split_point:].lstrip()

    return chunks


async def send_chunked(
    destination: Any,
    content: str,
    allowed_mentions: Optional[discord.AllowedMentions] = None,
    reference: Optional[discord.Message] = None,
) -> int:
    """Send ``content`` in as many messages as needed; returns the count sent.

    Only the first chunk carries ``reference`` so a reply threads once.
    """

    text = content.replace("\r\n", "\n").strip()
    if not text:
        return 0

    sent = 0
    for index, chunk in enumerate(split_message(text)):
        kwargs = {"allowed_mentions": allowed_mentions}
        if reference is not None and index == 0:
            kwargs["reference"] = reference
            kwargs["mention_author"] = False
        await destination.send(chunk, **kwargs)
        sent += 1
    return sent


def strip_bot_mention(content: str, bot_id: int) -> str:
    """Remove ``<@id>`` and ``<@!id>`` mentions of the bot."""

    return re.sub(rf"<@!?{bot_id}>", "", content).strip()


def build_user_text(message: discord.Message, cleaned: str) -> str:
    """Fold attachments into the plain text fed to memory and the planner."""

    lines: List[str] = []
    if cleaned.strip():
        lines.append(cleaned.strip())

    attachments = list(message.attachments)
    if attachments:
        if lines:
            lines.append("")
        lines.append("Attachments:")
        for attachment in attachments:
            label = attachment.filename or "file"
            lines.append(f"- {label}: {attachment.url}")

    return "\n".join(lines).strip()


def display_name(message: discord.Message) -> str:
    member = message.author
    return getattr(member, "display_name", None) or member.name


def channel_name(channel: Any) -> str:
    name = getattr(channel, "name", None)
    return name if isinstance(name, str) and name else str(channel.id)
