"""Conversation state machine for the plan-building dialogue.

    welcome -> gathering_info -> generating_plan -> awaiting_approval
    awaiting_approval -> approved | gathering_info
    approved <-> chat
    approved | chat -> welcome          ("new plan" intent)

Each user turn runs two passes:

    advance(state, message)             before the LLM call
    post_process(state, reply, profile) after the LLM reply arrives

Both are pure: they return the fields to merge into ConversationState plus
any side effects for the orchestrator to run. Nothing here touches the store,
the LLM or the database.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
import re
from typing import Any, Dict, List, Optional

from agents.plan_parser import (
    PlanTextParser,
    extract_plan_metadata,
    validate_plan,
)
from agents.slot_extractor import SlotExtractor
from config.settings import DEFAULT_PLAN_WEEKS, MIN_PLAN_WEEKS
from models.session import (
    ConversationStage,
    ConversationState,
    GatheredInfo,
    Plan,
    PlanMetadata,
    UserProfile,
)
from tools.deadline import clamp_weeks, compute_safe_deadline


APPROVAL_PATTERN = re.compile(
    r"^(?:yes|approve|looks good|perfect|great|ok|okay|sure|accept|save|confirm)\b",
    re.IGNORECASE,
)
REJECTION_PATTERN = re.compile(
    r"^(?:no|reject|change|modify|different|revise|but)\b",
    re.IGNORECASE,
)
NEW_PLAN_PATTERN = re.compile(r"new plan|another plan|start over", re.IGNORECASE)


class Effect(Enum):
    # Persist the pending plan (ApprovalWorkflow) before merging updates
    COMMIT_PLAN = "commit_plan"


@dataclass
class Transition:
    """Result of a pre-call pass.

    Effects run first; `updates` are merged into the state afterwards.
    """
    updates: Dict[str, Any] = field(default_factory=dict)
    effects: List[Effect] = field(default_factory=list)
    extracted: Optional[GatheredInfo] = None

    @property
    def target_stage(self) -> Optional[ConversationStage]:
        return self.updates.get("stage")


@dataclass
class PostCallOutcome:
    updates: Dict[str, Any] = field(default_factory=dict)
    plan_generated: bool = False
    awaiting_approval: bool = False


def classify_reply(message: str) -> Optional[str]:
    """'reject', 'approve' or None. Rejection is checked first."""
    text = (message or "").strip().lower()
    if REJECTION_PATTERN.match(text):
        return "reject"
    if APPROVAL_PATTERN.match(text):
        return "approve"
    return None


def wants_new_plan(message: str) -> bool:
    return NEW_PLAN_PATTERN.search(message or "") is not None


def advance(state: ConversationState, message: str,
            extractor: Optional[SlotExtractor] = None) -> Transition:
    """Pre-call pass: decide the stage before the LLM sees this message."""
    extractor = extractor or SlotExtractor()
    stage = state.stage

    # The very first message only clears the flag
    if state.is_first_message:
        return Transition(updates={"is_first_message": False})

    if stage == ConversationStage.WELCOME:
        extracted = extractor.extract(message)
        return Transition(
            updates={
                "stage": ConversationStage.GATHERING_INFO,
                "gathered_info": state.gathered_info.merge(extracted),
            },
            extracted=extracted,
        )

    if stage == ConversationStage.GATHERING_INFO:
        extracted = extractor.extract(message)
        merged = state.gathered_info.merge(extracted)
        updates: Dict[str, Any] = {"gathered_info": merged}
        if merged.is_complete:
            updates["stage"] = ConversationStage.GENERATING_PLAN
        return Transition(updates=updates, extracted=extracted)

    if stage == ConversationStage.GENERATING_PLAN:
        # The LLM reply decides; see post_process
        return Transition()

    if stage == ConversationStage.AWAITING_APPROVAL:
        intent = classify_reply(message)

        if intent == "reject":
            extracted = extractor.extract(message)
            return Transition(
                updates={
                    "stage": ConversationStage.GATHERING_INFO,
                    "gathered_info": state.gathered_info.merge(extracted),
                    "generated_plan": None,
                },
                extracted=extracted,
            )

        if intent == "approve" and state.generated_plan is not None:
            return Transition(
                updates={"stage": ConversationStage.APPROVED},
                effects=[Effect.COMMIT_PLAN],
            )

        return Transition()

    if stage in (ConversationStage.APPROVED, ConversationStage.CHAT):
        if wants_new_plan(message):
            return Transition(updates={
                "stage": ConversationStage.WELCOME,
                "gathered_info": GatheredInfo(),
                "generated_plan": None,
            })
        return Transition(updates={"stage": ConversationStage.CHAT})

    return Transition()


def finalize_plan(plan: Plan, gathered: GatheredInfo, metadata: PlanMetadata,
                  profile: Optional[UserProfile] = None,
                  today: Optional[date] = None) -> Plan:
    """Fill goal/duration/deadline/weights; explicit slots beat the LLM's prose."""
    weeks = gathered.duration_weeks
    if weeks is None:
        weeks = metadata.duration_weeks
    if weeks is None:
        weeks = DEFAULT_PLAN_WEEKS
    duration_weeks = clamp_weeks(weeks) or MIN_PLAN_WEEKS

    deadline = compute_safe_deadline(
        provided_deadline=gathered.deadline,
        provided_weeks=duration_weeks,
        today=today,
    )

    plan.goal = gathered.goal or metadata.goal
    plan.duration_weeks = duration_weeks
    plan.deadline = deadline.isoformat()
    plan.current_weight = profile.weight if profile else None
    plan.goal_weight = metadata.goal_weight
    return plan


def post_process(state: ConversationState, llm_text: str,
                 profile: Optional[UserProfile] = None,
                 parser: Optional[PlanTextParser] = None,
                 today: Optional[date] = None) -> PostCallOutcome:
    """Post-call pass: only generating_plan can move, and only on a valid plan."""
    if state.stage == ConversationStage.GENERATING_PLAN:
        parser = parser or PlanTextParser()
        plan = parser.parse(llm_text)

        if plan is not None and validate_plan(plan):
            metadata = extract_plan_metadata(llm_text)
            finalized = finalize_plan(plan, state.gathered_info, metadata, profile, today)
            return PostCallOutcome(
                updates={
                    "stage": ConversationStage.AWAITING_APPROVAL,
                    "generated_plan": finalized,
                },
                plan_generated=True,
                awaiting_approval=True,
            )

    return PostCallOutcome(
        awaiting_approval=state.stage == ConversationStage.AWAITING_APPROVAL,
    )
