"""FitCoach Data Models.

This module contains the dataclasses for conversation state and plans.

Models:
    UserProfile: Caller-supplied body metrics and equipment.
    GatheredInfo: Plan slots collected from the conversation.
    Exercise / Plan / PlanMetadata: Parsed candidate workout plans.
    ConversationState: Per-user stage, slots and pending plan.
    ConversationStage: Enum for the dialogue stages.
    TurnResult: Outcome of one user turn.
"""
from models.session import (
    UserProfile,
    GatheredInfo,
    Exercise,
    Plan,
    PlanMetadata,
    ConversationState,
    ConversationStage,
    TurnResult,
)

__all__ = [
    "UserProfile",
    "GatheredInfo",
    "Exercise",
    "Plan",
    "PlanMetadata",
    "ConversationState",
    "ConversationStage",
    "TurnResult",
]
