from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field, fields, replace, asdict
from datetime import date, datetime
from enum import Enum


class ConversationStage(Enum):
    """Where the user is in the plan-building dialogue."""
    WELCOME = "welcome"
    GATHERING_INFO = "gathering_info"
    GENERATING_PLAN = "generating_plan"
    AWAITING_APPROVAL = "awaiting_approval"
    APPROVED = "approved"
    CHAT = "chat"


# Stages in which a candidate plan may be held
PLAN_HOLDING_STAGES = (ConversationStage.AWAITING_APPROVAL, ConversationStage.APPROVED)


@dataclass
class UserProfile:
    """Long-term memory: who the user is, as supplied by the caller."""
    height: Optional[float] = None      # cm
    weight: Optional[float] = None      # kg
    gender: Optional[str] = None
    birthdate: Optional[str] = None     # ISO date
    equipment: bool = False

    @property
    def age(self) -> Optional[int]:
        if not self.birthdate:
            return None
        try:
            birth = datetime.fromisoformat(str(self.birthdate)).date()
        except ValueError:
            return None
        today = date.today()
        years = today.year - birth.year
        if (today.month, today.day) < (birth.month, birth.day):
            years -= 1
        return years

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "UserProfile":
        data = data or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class GatheredInfo:
    """Short-term memory: the plan slots extracted from the conversation so far."""
    goal: Optional[str] = None
    workout_style: Optional[str] = None
    days: Optional[int] = None              # 1-7 per week
    deadline: Optional[str] = None          # ISO date string
    duration_weeks: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        """Do we have enough to ask for a plan?

        Deadline/duration is not required: an absent timeframe falls back to
        the 4-week default when the plan is finalized.
        """
        return (
            self.goal is not None and
            self.workout_style is not None and
            self.days is not None
        )

    @property
    def missing_fields(self) -> List[str]:
        missing = []
        if self.goal is None: missing.append("fitness goal")
        if self.workout_style is None: missing.append("preferred workout style")
        if self.days is None: missing.append("available days per week")
        if self.deadline is None and self.duration_weeks is None: missing.append("deadline or timeframe")
        return missing

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def merge(self, partial: "GatheredInfo") -> "GatheredInfo":
        """Overwrite only the fields that are set on `partial`."""
        updates = {
            f.name: getattr(partial, f.name)
            for f in fields(partial)
            if getattr(partial, f.name) is not None
        }
        return replace(self, **updates)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Exercise:
    category: str
    name: str
    duration: str
    days: List[str] = field(default_factory=list)

    def add_day(self, day: Optional[str]):
        if day and day not in self.days:
            self.days.append(day)

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "name": self.name,
            "duration": self.duration,
            "days": list(self.days),
        }


@dataclass
class Plan:
    """A candidate workout plan, parsed from an LLM reply.

    The finalize fields (goal .. goal_weight) are filled in once the plan is
    accepted as the user's pending plan.
    """
    exercises: List[Exercise] = field(default_factory=list)
    plan_name: str = "AI Generated Workout Plan"
    is_valid: bool = True

    goal: Optional[str] = None
    duration_weeks: Optional[int] = None
    deadline: Optional[str] = None
    current_weight: Optional[float] = None
    goal_weight: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "plan_name": self.plan_name,
            "exercises": [ex.to_dict() for ex in self.exercises],
            "is_valid": self.is_valid,
            "goal": self.goal,
            "duration_weeks": self.duration_weeks,
            "deadline": self.deadline,
            "current_weight": self.current_weight,
            "goal_weight": self.goal_weight,
        }


@dataclass
class PlanMetadata:
    """Facts the LLM stated in its own prose; used only to fill gaps."""
    goal: Optional[str] = None
    duration_weeks: Optional[int] = None
    goal_weight: Optional[float] = None


@dataclass
class ConversationState:
    """The flowing state of the chat for one user."""
    stage: ConversationStage = ConversationStage.WELCOME
    gathered_info: GatheredInfo = field(default_factory=GatheredInfo)
    generated_plan: Optional[Plan] = None
    is_first_message: bool = True


@dataclass
class TurnResult:
    """What one user turn hands back to the caller."""
    reply: str
    conversation_state: ConversationStage
    plan_generated: bool = False
    awaiting_approval: bool = False

    def to_dict(self) -> dict:
        return {
            "reply": self.reply,
            "conversationState": self.conversation_state.value,
            "planGenerated": self.plan_generated,
            "awaitingApproval": self.awaiting_approval,
        }
