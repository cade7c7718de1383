"""Tests for the per-user ConversationStore and its eviction policies."""
import pytest

from models.session import ConversationStage, Exercise, GatheredInfo, Plan
from services.conversation_store import (
    ConversationStore,
    LRUEviction,
    NoEviction,
    TTLEviction,
)


class FakeClock:

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _plan():
    return Plan(exercises=[Exercise("Cardio", "Running", "30 mins", ["Monday"])])


class TestStateAccess:

    def test_lazy_default(self, store):
        state = store.get("user_1")

        assert state.stage == ConversationStage.WELCOME
        assert state.is_first_message is True
        assert state.generated_plan is None
        assert state.gathered_info.is_empty()
        assert "user_1" in store

    def test_users_are_isolated(self, store):
        store.merge("user_1", stage=ConversationStage.CHAT)
        assert store.get("user_2").stage == ConversationStage.WELCOME

    def test_merge_returns_new_state(self, store):
        state = store.merge("user_1", is_first_message=False, stage=ConversationStage.GATHERING_INFO)

        assert state.is_first_message is False
        assert state.stage == ConversationStage.GATHERING_INFO
        assert store.get("user_1") == state

    def test_merge_rejects_unknown_fields(self, store):
        with pytest.raises(TypeError):
            store.merge("user_1", mood="happy")

    def test_reset(self, store):
        store.merge("user_1", stage=ConversationStage.CHAT)
        store.save_history("user_1", [{"role": "user", "content": "hi"}])
        store.reset("user_1")

        assert "user_1" not in store
        assert store.get("user_1").stage == ConversationStage.WELCOME
        assert store.get_history("user_1") == []


class TestGatheredInfoMerge:

    def test_partial_merge_keeps_existing_slots(self, store):
        store.merge_gathered_info("user_1", GatheredInfo(goal="weight loss", days=3))
        state = store.merge_gathered_info("user_1", GatheredInfo(workout_style="Yoga"))

        assert state.gathered_info == GatheredInfo(goal="weight loss", workout_style="Yoga", days=3)

    def test_none_never_overwrites(self, store):
        store.merge_gathered_info("user_1", GatheredInfo(goal="weight loss"))
        state = store.merge_gathered_info("user_1", GatheredInfo(goal=None, days=4))

        assert state.gathered_info.goal == "weight loss"
        assert state.gathered_info.days == 4

    def test_later_value_wins(self, store):
        store.merge_gathered_info("user_1", GatheredInfo(days=3))
        state = store.merge_gathered_info("user_1", GatheredInfo(days=5))
        assert state.gathered_info.days == 5


class TestPlanInvariant:

    def test_plan_kept_while_awaiting_approval(self, store):
        state = store.merge("user_1", stage=ConversationStage.AWAITING_APPROVAL, generated_plan=_plan())
        assert state.generated_plan is not None

    def test_approved_keeps_last_plan(self, store):
        store.merge("user_1", stage=ConversationStage.AWAITING_APPROVAL, generated_plan=_plan())
        state = store.merge("user_1", stage=ConversationStage.APPROVED)
        assert state.generated_plan is not None

    def test_plan_dropped_outside_holding_stages(self, store):
        store.merge("user_1", stage=ConversationStage.AWAITING_APPROVAL, generated_plan=_plan())
        state = store.merge("user_1", stage=ConversationStage.GATHERING_INFO)
        assert state.generated_plan is None

        state = store.merge("user_1", generated_plan=_plan())
        assert state.generated_plan is None


class TestHistory:

    def test_history_capped_at_twenty(self, store):
        messages = [{"role": "user", "content": f"msg {i}"} for i in range(25)]
        store.save_history("user_1", messages)

        history = store.get_history("user_1")
        assert len(history) == 20
        assert history[0]["content"] == "msg 5"
        assert history[-1]["content"] == "msg 24"

    def test_get_history_returns_copy(self, store):
        history = store.get_history("user_1")
        history.append({"role": "user", "content": "hi"})
        assert store.get_history("user_1") == []

    def test_custom_cap(self):
        store = ConversationStore(max_history=2)
        store.save_history("user_1", [{"role": "user", "content": str(i)} for i in range(3)])
        assert [m["content"] for m in store.get_history("user_1")] == ["1", "2"]


class TestEviction:

    def test_no_eviction_by_default(self, store):
        assert isinstance(store.eviction, NoEviction)
        for i in range(50):
            store.get(f"user_{i}")
        assert len(store) == 50

    def test_lru_evicts_least_recent(self):
        store = ConversationStore(eviction=LRUEviction(max_users=2))
        store.get("a")
        store.get("b")
        store.get("a")
        store.get("c")

        assert "a" in store
        assert "c" in store
        assert "b" not in store

    def test_lru_requires_positive_size(self):
        with pytest.raises(ValueError):
            LRUEviction(max_users=0)

    def test_ttl_evicts_idle_users(self):
        clock = FakeClock()
        store = ConversationStore(eviction=TTLEviction(ttl_seconds=60, clock=clock))
        store.merge("idle", stage=ConversationStage.CHAT)

        clock.now = 30
        store.get("active")
        clock.now = 61
        store.get("active")

        assert "idle" not in store
        assert "active" in store

    def test_current_user_never_evicted(self):
        clock = FakeClock()
        store = ConversationStore(eviction=TTLEviction(ttl_seconds=10, clock=clock))
        store.merge("user_1", stage=ConversationStage.CHAT)

        clock.now = 100
        assert store.get("user_1").stage == ConversationStage.CHAT
