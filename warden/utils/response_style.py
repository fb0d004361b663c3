"""Response styles for mention replies."""

from __future__ import annotations

import enum
import unicodedata
from typing import Dict, List, Optional


class ResponseStyle(str, enum.Enum):
    NORMAL = "normal"
    CONCISE = "concise"
    DETAILED = "detailed"
    BULLET = "bullet"


_ALIASES: Dict[ResponseStyle, List[str]] = {
    ResponseStyle.NORMAL: ["normal", "standard", "neutre", "default", "defaut"],
    ResponseStyle.CONCISE: ["concise", "court", "bref", "brève", "short"],
    ResponseStyle.DETAILED: ["detailed", "détaillé", "détaillée", "long", "longue", "complet"],
    ResponseStyle.BULLET: ["bullet", "bullets", "liste", "list", "points", "puces"],
}

_LABELS: Dict[ResponseStyle, str] = {
    ResponseStyle.NORMAL: "Normal",
    ResponseStyle.CONCISE: "Concise",
    ResponseStyle.DETAILED: "Detailed",
    ResponseStyle.BULLET: "Bullet points",
}

_INSTRUCTIONS: Dict[ResponseStyle, str] = {
    ResponseStyle.NORMAL: "Style: answer naturally, neither too short nor too long.",
    ResponseStyle.CONCISE: "Style: be very concise and get to the point (4-6 sentences max).",
    ResponseStyle.DETAILED: "Style: answer in depth, with useful steps and details.",
    ResponseStyle.BULLET: "Style: answer as a short, structured bullet list.",
}


def _normalize(token: str) -> str:
    decomposed = unicodedata.normalize("NFD", token.strip().lower())
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def parse_response_style(value: str) -> Optional[ResponseStyle]:
    normalized = _normalize(value)
    if not normalized:
        return None
    for style, aliases in _ALIASES.items():
        if any(_normalize(alias) == normalized for alias in aliases):
            return style
    return None


def style_label(style: ResponseStyle) -> str:
    return _LABELS[style]


def style_instruction(style: ResponseStyle) -> str:
    return _INSTRUCTIONS[style]


def list_style_options() -> str:
    return ", ".join(f"{style.value} ({label})" for style, label in _LABELS.items())
