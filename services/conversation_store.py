"""Conversation Store Module

Per-user conversation memory for the plan-building dialogue:
1. Conversation state (stage, gathered slots, pending plan)
2. Bounded chat history (most recent 20 turns)
3. Pluggable eviction so idle users do not accumulate forever

The store is process-local and unlocked. Callers must ensure at most one
in-flight turn per user id.
"""
import logging
import time
from collections import OrderedDict
from dataclasses import replace, fields
from typing import Callable, Dict, List
from config.settings import MAX_HISTORY_MESSAGES, STORE_MAX_USERS, STORE_TTL_SECONDS
from models.session import (
    ConversationState,
    GatheredInfo,
    PLAN_HOLDING_STAGES,
)

logger = logging.getLogger(__name__)


# === Eviction Policies ===

class NoEviction:
    """Keep every user for the lifetime of the process."""

    def touch(self, user_id: str):
        pass

    def forget(self, user_id: str):
        pass

    def select_victims(self) -> List[str]:
        return []


class LRUEviction:
    """Evict the least recently used users beyond `max_users`."""

    def __init__(self, max_users: int):
        if max_users < 1:
            raise ValueError("max_users must be >= 1")
        self.max_users = max_users
        self._order: "OrderedDict[str, None]" = OrderedDict()

    def touch(self, user_id: str):
        self._order[user_id] = None
        self._order.move_to_end(user_id)

    def forget(self, user_id: str):
        self._order.pop(user_id, None)

    def select_victims(self) -> List[str]:
        overflow = len(self._order) - self.max_users
        if overflow <= 0:
            return []
        return list(self._order.keys())[:overflow]


class TTLEviction:
    """Evict users idle for longer than `ttl_seconds`."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._last_seen: Dict[str, float] = {}

    def touch(self, user_id: str):
        self._last_seen[user_id] = self._clock()

    def forget(self, user_id: str):
        self._last_seen.pop(user_id, None)

    def select_victims(self) -> List[str]:
        now = self._clock()
        return [uid for uid, seen in self._last_seen.items() if now - seen > self.ttl_seconds]


def eviction_from_settings():
    """Build the eviction policy configured in settings."""
    if STORE_TTL_SECONDS:
        return TTLEviction(STORE_TTL_SECONDS)
    if STORE_MAX_USERS:
        return LRUEviction(STORE_MAX_USERS)
    return NoEviction()


class ConversationStore:
    """
    In-memory conversation store keyed by user id.

    Features:
    - get (lazy default) / merge / merge_gathered_info / reset
    - History capped at the most recent `max_history` messages
    - Injectable eviction policy (none, LRU or TTL)
    """

    def __init__(self, max_history: int = MAX_HISTORY_MESSAGES, eviction=None):
        self._states: Dict[str, ConversationState] = {}
        self._histories: Dict[str, List[Dict[str, str]]] = {}
        self.max_history = max_history
        self.eviction = eviction if eviction is not None else NoEviction()

    # === Conversation State ===

    def get(self, user_id: str) -> ConversationState:
        """Get the state for a user, creating the welcome state on first access."""
        self._touch(user_id)
        state = self._states.get(user_id)
        if state is None:
            state = ConversationState()
            self._states[user_id] = state
            logger.info(f"Created conversation state for user {user_id}")
        return state

    def merge(self, user_id: str, **updates) -> ConversationState:
        """Shallow-merge state fields and return the new state.

        Never fails for valid field names. A TypeError for an unknown field
        is a programming error in the caller, not a runtime condition.
        """
        known = {f.name for f in fields(ConversationState)}
        unknown = set(updates) - known
        if unknown:
            raise TypeError(f"Unknown conversation state fields: {sorted(unknown)}")

        current = self.get(user_id)
        new_state = replace(current, **updates)

        # A pending plan only lives in awaiting_approval / approved
        if new_state.stage not in PLAN_HOLDING_STAGES and new_state.generated_plan is not None:
            new_state = replace(new_state, generated_plan=None)

        if new_state.stage != current.stage:
            logger.info(f"User {user_id}: {current.stage.value} -> {new_state.stage.value}")

        self._states[user_id] = new_state
        return new_state

    def merge_gathered_info(self, user_id: str, partial: GatheredInfo) -> ConversationState:
        """Overwrite only the slots present in `partial`."""
        current = self.get(user_id)
        if partial.is_empty():
            return current
        return self.merge(user_id, gathered_info=current.gathered_info.merge(partial))

    def reset(self, user_id: str):
        """Drop state and history for a user."""
        self._states.pop(user_id, None)
        self._histories.pop(user_id, None)
        self.eviction.forget(user_id)
        logger.info(f"Reset conversation for user {user_id}")

    # === History ===

    def get_history(self, user_id: str) -> List[Dict[str, str]]:
        """A copy of the user's history; mutate it and hand it back to save_history."""
        self._touch(user_id)
        return list(self._histories.get(user_id, []))

    def save_history(self, user_id: str, messages: List[Dict[str, str]]):
        """Keep only the last `max_history` messages."""
        self._touch(user_id)
        self._histories[user_id] = list(messages)[-self.max_history:]

    # === Introspection ===

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._states or user_id in self._histories

    def __len__(self) -> int:
        return len(set(self._states) | set(self._histories))

    def _touch(self, user_id: str):
        self.eviction.touch(user_id)
        for victim in self.eviction.select_victims():
            if victim == user_id:
                continue
            self._states.pop(victim, None)
            self._histories.pop(victim, None)
            self.eviction.forget(victim)
            logger.info(f"Evicted conversation for user {victim}")


# Global conversation store instance
_conversation_store = None


def get_conversation_store() -> ConversationStore:
    """Get or create the global conversation store."""
    global _conversation_store
    if _conversation_store is None:
        _conversation_store = ConversationStore(eviction=eviction_from_settings())
    return _conversation_store
