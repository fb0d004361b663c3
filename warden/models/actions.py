"""Typed payloads exchanged between the auto-action pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class ChatMessage:
    """A normalized inbound guild message as shown to the planner."""

    id: str
    author_id: str
    author_name: str
    content: str

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "authorId": self.author_id,
            "authorName": self.author_name,
            "content": self.content,
        }


class _ActionModel(BaseModel):
    class Config:
        populate_by_name = True
        strict = True
        frozen = True


class AddReaction(_ActionModel):
    type: Literal["add_reaction"] = "add_reaction"
    message_id: str = Field(..., alias="messageId", min_length=1)
    emoji: str = Field(..., min_length=1, max_length=32)


class SendMessage(_ActionModel):
    type: Literal["send_message"] = "send_message"
    content: str = Field(..., min_length=1, max_length=800)


class TimeoutUser(_ActionModel):
    type: Literal["timeout_user"] = "timeout_user"
    user_id: str = Field(..., alias="userId", min_length=1)
    minutes: float = Field(..., ge=1, le=60)
    reason: str = Field(..., min_length=1, max_length=200)


class UntimeoutUser(_ActionModel):
    type: Literal["untimeout_user"] = "untimeout_user"
    user_id: str = Field(..., alias="userId", min_length=1)
    reason: Optional[str] = Field(default=None, min_length=1, max_length=200)


ProposedAction = Annotated[
    Union[AddReaction, SendMessage, TimeoutUser, UntimeoutUser],
    Field(discriminator="type"),
]


class ActionPlan(BaseModel):
    """Summary plus the ordered actions proposed for one cycle."""

    summary: str = ""
    actions: List[ProposedAction] = Field(default_factory=list)


class MessageDecision(_ActionModel):
    send: bool
    content: Optional[str] = Field(default=None, min_length=1, max_length=800)


class EmojiChoice(_ActionModel):
    emoji: str = Field(..., min_length=1, max_length=32)


class PlanPayload(_ActionModel):
    """Schema of the plan object the oracle is asked to produce."""

    summary: Optional[str] = Field(default=None, max_length=1200)
    actions: Optional[List[ProposedAction]] = None
