"""Tests for plan acquisition and fallback augmentation."""

import json

import pytest

from warden.models.actions import AddReaction, SendMessage, TimeoutUser
from warden.services.planner import ActionPlanner
from warden.services.window import WindowSnapshot

from conftest import FakeLLM, chat


def snapshot(*messages, summary="previous summary"):
    return WindowSnapshot(messages=tuple(messages), summary=summary)


def plan(summary="", actions=()):
    return json.dumps({"summary": summary, "actions": list(actions)})


WINDOW = snapshot(chat("m1", "111", "hello"), chat("m2", "222", "lol"), chat("m3", "111", "gg"))


class TestActionPlanner:
    """Main plan, then optional message and reaction fallbacks."""

    @pytest.mark.asyncio
    async def test_full_plan_needs_no_fallbacks(self):
        llm = FakeLLM(
            plan=plan(
                "new summary",
                [
                    {"type": "send_message", "content": "nice"},
                    {"type": "add_reaction", "messageId": "m2", "emoji": "😂"},
                ],
            )
        )
        planner = ActionPlanner(llm, max_actions=3, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert result.summary == "new summary"
        assert [action.type for action in result.actions] == ["send_message", "add_reaction"]
        assert llm.kinds() == ["plan"]

    @pytest.mark.asyncio
    async def test_plan_payload_carries_context(self):
        llm = FakeLLM(plan=plan(), decision='{"send": false}', emoji='{"emoji": "👋"}')
        planner = ActionPlanner(llm, max_actions=2, max_timeout_minutes=15)

        await planner.acquire("general", snapshot(chat("m1", "111", "need a recap")))

        payload = llm.calls[0]["payload"]
        assert payload["channel"] == "general"
        assert payload["summary"] == "previous summary"
        assert payload["summaryRequested"] is True
        assert payload["constraints"] == {"maxActions": 2, "maxTimeoutMinutes": 15}
        assert payload["messages"][0] == {
            "id": "m1",
            "authorId": "111",
            "authorName": "user111",
            "content": "need a recap",
        }

    @pytest.mark.asyncio
    async def test_plan_failure_keeps_summary_and_continues(self):
        llm = FakeLLM(
            plan=RuntimeError("network down"),
            decision='{"send": true, "content": "hi all"}',
            emoji='{"emoji": "👍"}',
        )
        planner = ActionPlanner(llm, max_actions=3, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert result.summary == "previous summary"
        assert result.actions == [
            SendMessage(content="hi all"),
            AddReaction(message_id="m3", emoji="👍"),
        ]

    @pytest.mark.asyncio
    async def test_unparseable_plan_is_empty(self):
        llm = FakeLLM(plan="I would react to everything!", decision='{"send": false}', emoji="{}")
        planner = ActionPlanner(llm, max_actions=3, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert result.summary == "previous summary"
        assert result.actions == []
        assert llm.kinds() == ["plan", "decision", "emoji"]

    @pytest.mark.asyncio
    async def test_filters_out_of_window_targets(self):
        llm = FakeLLM(
            plan=plan(
                "s",
                [
                    {"type": "timeout_user", "userId": "444", "minutes": 5, "reason": "spam"},
                    {"type": "add_reaction", "messageId": "m99", "emoji": "👀"},
                    {"type": "timeout_user", "userId": "222", "minutes": 5, "reason": "spam"},
                ],
            ),
            decision='{"send": false}',
            emoji='{"emoji": "✅"}',
        )
        planner = ActionPlanner(llm, max_actions=3, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert result.actions == [
            TimeoutUser(user_id="222", minutes=5, reason="spam"),
            AddReaction(message_id="m3", emoji="✅"),
        ]

    @pytest.mark.asyncio
    async def test_fallback_message_is_refiltered(self):
        llm = FakeLLM(
            plan=plan("s", [{"type": "add_reaction", "messageId": "m1", "emoji": "👍"}]),
            decision='{"send": true, "content": "@everyone wake up"}',
        )
        planner = ActionPlanner(llm, max_actions=3, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert result.actions == [AddReaction(message_id="m1", emoji="👍")]

    @pytest.mark.asyncio
    async def test_fallback_recap_respects_summary_request(self):
        llm = FakeLLM(
            plan=plan("s", [{"type": "add_reaction", "messageId": "m1", "emoji": "👍"}]),
            decision='{"send": true, "content": "Recap: all good here."}',
        )
        planner = ActionPlanner(llm, max_actions=3, max_timeout_minutes=10)

        quiet = await planner.acquire("general", WINDOW)
        asked = await planner.acquire(
            "general", snapshot(chat("m1", "111", "tl;dr please?"))
        )

        assert [action.type for action in quiet.actions] == ["add_reaction"]
        assert [action.type for action in asked.actions] == ["add_reaction", "send_message"]

    @pytest.mark.asyncio
    async def test_no_message_decision_when_full(self):
        llm = FakeLLM(
            plan=plan(
                "s",
                [
                    {"type": "add_reaction", "messageId": "m1", "emoji": "👍"},
                    {"type": "add_reaction", "messageId": "m2", "emoji": "👍"},
                ],
            )
        )
        planner = ActionPlanner(llm, max_actions=2, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert len(result.actions) == 2
        assert llm.kinds() == ["plan"]

    @pytest.mark.asyncio
    async def test_augmentation_never_exceeds_max_actions(self):
        llm = FakeLLM(
            plan=plan("s", [{"type": "untimeout_user", "userId": "111"}]),
            decision='{"send": true, "content": "hello"}',
            emoji='{"emoji": "🙂"}',
        )
        planner = ActionPlanner(llm, max_actions=2, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert [action.type for action in result.actions] == ["untimeout_user", "send_message"]
        assert "emoji" not in llm.kinds()

    @pytest.mark.asyncio
    async def test_fallback_failures_keep_validated_actions(self):
        llm = FakeLLM(
            plan=plan("s", [{"type": "untimeout_user", "userId": "111"}]),
            decision=RuntimeError("decision failed"),
            emoji=RuntimeError("emoji failed"),
        )
        planner = ActionPlanner(llm, max_actions=3, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert [action.type for action in result.actions] == ["untimeout_user"]
        assert result.summary == "s"

    @pytest.mark.asyncio
    async def test_undecodable_fallback_answers_keep_validated_actions(self):
        huge = "9" * 5000
        llm = FakeLLM(
            plan=plan(
                "s", [{"type": "timeout_user", "userId": "111", "minutes": 5, "reason": "spam"}]
            ),
            decision='{"send": true, "content": ' + huge + "}",
            emoji='{"emoji": ' + huge + "}",
        )
        planner = ActionPlanner(llm, max_actions=3, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert [action.type for action in result.actions] == ["timeout_user"]
        assert result.summary == "s"

    @pytest.mark.asyncio
    async def test_undecodable_plan_keeps_previous_summary(self):
        llm = FakeLLM(
            plan='{"summary": "new", "n": ' + "1" * 5000 + "}",
            decision='{"send": false}',
        )
        planner = ActionPlanner(llm, max_actions=3, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert result.summary == "previous summary"
        assert result.actions == []

    @pytest.mark.asyncio
    async def test_empty_snapshot_skips_reaction(self):
        llm = FakeLLM(plan=plan(), decision='{"send": false}', emoji='{"emoji": "👍"}')
        planner = ActionPlanner(llm, max_actions=3, max_timeout_minutes=10)

        result = await planner.acquire("general", snapshot())

        assert result.actions == []
        assert "emoji" not in llm.kinds()

    @pytest.mark.asyncio
    async def test_zero_max_actions_does_nothing(self):
        llm = FakeLLM(plan=plan("s", [{"type": "send_message", "content": "hi"}]))
        planner = ActionPlanner(llm, max_actions=0, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert result.actions == []
        assert llm.kinds() == ["plan"]

    @pytest.mark.asyncio
    async def test_unconfigured_llm_degrades_quietly(self):
        planner = ActionPlanner(FakeLLM(), max_actions=3, max_timeout_minutes=10)

        result = await planner.acquire("general", WINDOW)

        assert result.summary == "previous summary"
        assert result.actions == []
