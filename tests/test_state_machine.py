"""State Machine Tests

Covers both passes of a turn: advance() before the LLM call and
post_process() on its reply.
"""
from datetime import date, timedelta

from core.state_machine import (
    Effect,
    advance,
    classify_reply,
    finalize_plan,
    post_process,
    wants_new_plan,
)
from models.session import (
    ConversationStage,
    ConversationState,
    Exercise,
    GatheredInfo,
    Plan,
    PlanMetadata,
    UserProfile,
)
from tests.conftest import SAMPLE_PLAN_REPLY

TODAY = date(2026, 1, 15)
COMPLETE_INFO = GatheredInfo(goal="weight loss", workout_style="Cardio", days=3)


def _state(stage, **kwargs):
    kwargs.setdefault("is_first_message", False)
    return ConversationState(stage=stage, **kwargs)


def _plan():
    return Plan(exercises=[Exercise("Cardio", "Running", "30 mins", ["Monday"])])


class TestClassifyReply:

    def test_intents(self):
        test_cases = [
            ("yes", "approve"),
            ("Yes please, save it", "approve"),
            ("looks good to me", "approve"),
            ("ok", "approve"),
            ("no", "reject"),
            ("no, change the days", "reject"),
            ("Change it to yoga", "reject"),
            ("but I hate running", "reject"),
            ("hmm, what about Sundays?", None),
            ("I said yes", None),
            ("nope", None),
        ]
        for message, expected in test_cases:
            assert classify_reply(message) == expected, message

    def test_new_plan_intent(self):
        assert wants_new_plan("Can I get a new plan?")
        assert wants_new_plan("let's start over")
        assert not wants_new_plan("how do I do a plank?")


class TestAdvance:

    def test_first_message_only_clears_flag(self):
        state = ConversationState()
        transition = advance(state, "I want to lose weight, I like cardio, 3 days a week")

        assert transition.updates == {"is_first_message": False}
        assert transition.effects == []
        assert transition.target_stage is None

    def test_welcome_moves_to_gathering(self):
        transition = advance(_state(ConversationStage.WELCOME), "I want to lose weight")

        assert transition.target_stage == ConversationStage.GATHERING_INFO
        assert transition.updates["gathered_info"].goal == "weight loss"

    def test_gathering_stays_until_complete(self):
        state = _state(ConversationStage.GATHERING_INFO, gathered_info=GatheredInfo(goal="weight loss"))
        transition = advance(state, "I like cardio")

        assert transition.target_stage is None
        assert transition.updates["gathered_info"].workout_style == "Cardio"
        assert transition.updates["gathered_info"].goal == "weight loss"

    def test_gathering_complete_moves_to_generating(self):
        state = _state(ConversationStage.GATHERING_INFO,
                       gathered_info=GatheredInfo(goal="weight loss", workout_style="Cardio"))
        transition = advance(state, "3 days a week")

        assert transition.target_stage == ConversationStage.GENERATING_PLAN
        assert transition.updates["gathered_info"].is_complete

    def test_generating_waits_for_reply(self):
        transition = advance(_state(ConversationStage.GENERATING_PLAN, gathered_info=COMPLETE_INFO), "ok")
        assert transition.updates == {}
        assert transition.effects == []

    def test_approval_commits(self):
        state = _state(ConversationStage.AWAITING_APPROVAL, gathered_info=COMPLETE_INFO,
                       generated_plan=_plan())
        transition = advance(state, "yes")

        assert transition.effects == [Effect.COMMIT_PLAN]
        assert transition.target_stage == ConversationStage.APPROVED

    def test_approval_without_plan_is_ignored(self):
        transition = advance(_state(ConversationStage.AWAITING_APPROVAL), "yes")
        assert transition.effects == []
        assert transition.updates == {}

    def test_rejection_returns_to_gathering(self):
        """'no, change the days' clears the candidate plan."""
        state = _state(ConversationStage.AWAITING_APPROVAL, gathered_info=COMPLETE_INFO,
                       generated_plan=_plan())
        transition = advance(state, "no, change the days")

        assert transition.target_stage == ConversationStage.GATHERING_INFO
        assert transition.updates["generated_plan"] is None
        assert transition.effects == []

    def test_rejection_remerges_slots(self):
        state = _state(ConversationStage.AWAITING_APPROVAL, gathered_info=COMPLETE_INFO,
                       generated_plan=_plan())
        transition = advance(state, "no, make it 5 days a week")

        info = transition.updates["gathered_info"]
        assert info.days == 5
        assert info.goal == "weight loss"

    def test_unclear_reply_reprompts(self):
        state = _state(ConversationStage.AWAITING_APPROVAL, generated_plan=_plan())
        assert advance(state, "what is a plank?").updates == {}

    def test_approved_moves_to_chat(self):
        transition = advance(_state(ConversationStage.APPROVED, generated_plan=_plan()), "thanks!")
        assert transition.target_stage == ConversationStage.CHAT

    def test_new_plan_resets_to_welcome(self):
        for stage in [ConversationStage.APPROVED, ConversationStage.CHAT]:
            state = _state(stage, gathered_info=COMPLETE_INFO)
            transition = advance(state, "I want a new plan")

            assert transition.target_stage == ConversationStage.WELCOME
            assert transition.updates["gathered_info"] == GatheredInfo()
            assert transition.updates["generated_plan"] is None


class TestPostProcess:

    def test_valid_plan_moves_to_awaiting_approval(self):
        state = _state(ConversationStage.GENERATING_PLAN, gathered_info=COMPLETE_INFO)
        profile = UserProfile(weight=90)
        outcome = post_process(state, SAMPLE_PLAN_REPLY, profile, today=TODAY)

        assert outcome.plan_generated is True
        assert outcome.awaiting_approval is True
        assert outcome.updates["stage"] == ConversationStage.AWAITING_APPROVAL

        plan = outcome.updates["generated_plan"]
        assert plan.plan_name == "Cardio Kickstart"
        assert plan.goal == "weight loss"
        assert plan.duration_weeks == 4
        assert plan.deadline == (TODAY + timedelta(days=28)).isoformat()
        assert plan.current_weight == 90

    def test_non_plan_reply_stays_in_generating(self):
        state = _state(ConversationStage.GENERATING_PLAN, gathered_info=COMPLETE_INFO)
        outcome = post_process(state, "Let me think about the best split for you...")

        assert outcome.updates == {}
        assert outcome.plan_generated is False
        assert outcome.awaiting_approval is False

    def test_other_stages_ignore_plans(self):
        outcome = post_process(_state(ConversationStage.GATHERING_INFO), SAMPLE_PLAN_REPLY)
        assert outcome.updates == {}
        assert outcome.plan_generated is False

    def test_awaiting_flag_reported_while_waiting(self):
        state = _state(ConversationStage.AWAITING_APPROVAL, generated_plan=_plan())
        assert post_process(state, "Just reply yes or no!").awaiting_approval is True


class TestFinalizePlan:

    def test_gathered_values_beat_metadata(self):
        gathered = GatheredInfo(goal="muscle gain", duration_weeks=10)
        metadata = PlanMetadata(goal="weight loss", duration_weeks=8, goal_weight=75.0)
        plan = finalize_plan(_plan(), gathered, metadata, today=TODAY)

        assert plan.goal == "muscle gain"
        assert plan.duration_weeks == 10
        assert plan.goal_weight == 75.0
        assert plan.deadline == (TODAY + timedelta(weeks=10)).isoformat()

    def test_metadata_fills_gaps(self):
        plan = finalize_plan(_plan(), GatheredInfo(), PlanMetadata(goal="endurance", duration_weeks=8),
                             today=TODAY)
        assert plan.goal == "endurance"
        assert plan.duration_weeks == 8

    def test_duration_is_clamped(self):
        plan = finalize_plan(_plan(), GatheredInfo(duration_weeks=100), PlanMetadata(), today=TODAY)
        assert plan.duration_weeks == 52

        plan = finalize_plan(_plan(), GatheredInfo(duration_weeks=2), PlanMetadata(), today=TODAY)
        assert plan.duration_weeks == 4

    def test_explicit_deadline_is_kept(self):
        gathered = GatheredInfo(deadline="2026-06-01")
        plan = finalize_plan(_plan(), gathered, PlanMetadata(), today=TODAY)
        assert plan.deadline == "2026-06-01"
