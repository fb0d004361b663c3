"""Per-channel message windows and the registry that owns them."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Dict, FrozenSet, Optional, Tuple

from ..models.actions import ChatMessage
from .coalescer import CycleCoalescer


@dataclass(frozen=True)
class WindowSnapshot:
    """Immutable view of a channel window taken at cycle start."""

    messages: Tuple[ChatMessage, ...]
    summary: str

    @property
    def message_ids(self) -> FrozenSet[str]:
        return frozenset(message.id for message in self.messages)

    @property
    def author_ids(self) -> FrozenSet[str]:
        return frozenset(message.author_id for message in self.messages)

    @property
    def latest(self) -> Optional[ChatMessage]:
        return self.messages[-1] if self.messages else None


class ChannelWindow:
    """Bounded FIFO of recent messages plus the trigger counter."""

    def __init__(self, capacity: int, threshold: int):
        if capacity < 1:
            raise ValueError("Window capacity must be at least 1")
        self.capacity = capacity
        self.threshold = max(0, threshold)
        self.trigger_counter = 0
        self.running_summary = ""
        self._buffer: Deque[ChatMessage] = deque(maxlen=capacity)

    @property
    def buffer(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def ingest(self, message: ChatMessage) -> None:
        self._buffer.append(message)
        self.trigger_counter += 1

    def should_trigger(self) -> bool:
        return self.threshold > 0 and self.trigger_counter >= self.threshold

    def consume_trigger(self) -> bool:
        """Reset the counter and report True when the threshold was reached."""

        if not self.should_trigger():
            return False
        self.trigger_counter = 0
        return True

    def snapshot(self) -> WindowSnapshot:
        return WindowSnapshot(messages=tuple(self._buffer), summary=self.running_summary)

    def update_summary(self, summary: Optional[str]) -> None:
        cleaned = (summary or "").strip()
        if cleaned:
            self.running_summary = cleaned

    def clear(self) -> None:
        self._buffer.clear()
        self.trigger_counter = 0
        self.running_summary = ""


@dataclass
class ChannelState:
    """Everything the pipeline tracks for one channel."""

    channel_id: int
    window: ChannelWindow
    coalescer: Optional[CycleCoalescer] = None
    # Latest Discord channel/guild objects seen for this channel.
    channel: Any = None
    guild: Any = None
    epoch: int = 0


CycleRunner = Callable[[ChannelState], Awaitable[None]]


class ChannelRegistry:
    """Owns one lazily created ``ChannelState`` per channel id."""

    def __init__(self, window_size: int, threshold: int, run_cycle: CycleRunner):
        self._window_size = window_size
        self._threshold = threshold
        self._run_cycle = run_cycle
        self._channels: Dict[int, ChannelState] = {}

    def __contains__(self, channel_id: int) -> bool:
        return channel_id in self._channels

    def __len__(self) -> int:
        return len(self._channels)

    def get(self, channel_id: int) -> ChannelState:
        existing = self._channels.get(channel_id)
        if existing is not None:
            return existing

        state = ChannelState(
            channel_id=channel_id,
            window=ChannelWindow(self._window_size, self._threshold),
        )
        state.coalescer = CycleCoalescer(lambda: self._run_cycle(state), name=str(channel_id))
        self._channels[channel_id] = state
        return state

    def peek(self, channel_id: int) -> Optional[ChannelState]:
        return self._channels.get(channel_id)

    def reset(self, channel_id: int) -> bool:
        """Clear window, summary and any deferred run for a channel together.

        A cycle already running is not cancelled; bumping the epoch makes it
        discard its summary instead of writing it into the cleared window.
        """

        state = self._channels.get(channel_id)
        if state is None:
            return False
        state.window.clear()
        state.epoch += 1
        if state.coalescer is not None:
            state.coalescer.clear_deferred()
        return True

    def running_cycles(self) -> int:
        return sum(
            1
            for state in self._channels.values()
            if state.coalescer is not None and state.coalescer.is_running
        )
