"""PlanTextParser - Free-Text Workout Plan Extraction

Turns the coach model's prose reply into a structured candidate plan, and
validates / formats that plan for persistence.

Parsing is a single line-by-line scan carrying two pieces of context, the
current category and the current weekday. Headers update the context;
bulleted lines under an active category become exercises.

Design Decisions:
    1. Marker gate: a reply without a plan marker phrase is a normal chat
       reply, not a failed parse.
    2. Time-based durations only: reps/sets are stripped from names as noise
       and never become the duration.
    3. Same (name, category, duration) across day headers is one exercise
       whose days are the union.
    4. Exercises with no day header are spread over Mon/Wed/Fri round-robin.
"""
from typing import Any, Dict, List, Optional
import re
import logging
from models.session import Exercise, Plan, PlanMetadata

logger = logging.getLogger(__name__)

DEFAULT_PLAN_NAME = "AI Generated Workout Plan"
DEFAULT_DURATION = "30 mins"
DEFAULT_DAY_CYCLE = ["Monday", "Wednesday", "Friday"]

# Phrases that signal the reply is presenting a plan
PLAN_MARKERS = ["workout plan", "weekly plan", "exercise plan", "your plan", "personalized plan"]

# The only categories the coach is allowed to use
CATEGORIES = [
    "cardio", "yoga", "strength training", "core exercises",
    "stretching", "pilates", "cycling", "swimming",
]

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

PLAN_NAME_MARKER = "plan name:"
NOTES_MARKERS = ["tips:", "notes:", "recommendations:"]

BULLET_PATTERN = re.compile(r"^(?:[-•*]\s+|[-•]|\d+\.\s*)")
DURATION_PATTERN = re.compile(
    r"(\d+(?:\.\d+)?)\s*(minutes|minute|mins|min|seconds|second|secs|sec|hours|hour|hrs|hr)\b",
    re.IGNORECASE,
)
# Rep/set counts are noise: "3 sets of 12 reps", "3x12", "10 reps"
REPS_SETS_PATTERN = re.compile(
    r"\d+\s*x\s*\d+|\d+\s*(?:sets|set|reps|rep|rounds|round)\b(?:\s*(?:of|x))?",
    re.IGNORECASE,
)
PARENTHETICAL_PATTERN = re.compile(r"\(.*?\)|\[.*?\]")
SEPARATOR_PATTERN = re.compile(r"(?:^|\s)[-–—:|](?=\s|$)|[:–—|]")
EMPHASIS_PATTERN = re.compile(r"[*_#`]")
INLINE_CATEGORY_PATTERN = re.compile(
    r"^(" + "|".join(re.escape(c) for c in CATEGORIES) + r")\s*:\s*(.*)$",
    re.IGNORECASE,
)

MIN_NAME_LENGTH = 3


def _strip_emphasis(text: str) -> str:
    return EMPHASIS_PATTERN.sub("", text).strip()


def has_plan_markers(text: str) -> bool:
    lower = (text or "").lower()
    return any(marker in lower for marker in PLAN_MARKERS)


class PlanTextParser:
    """Line scanner that builds a Plan out of LLM prose."""

    def parse(self, ai_text: Optional[str]) -> Optional[Plan]:
        if not ai_text or not has_plan_markers(ai_text):
            return None

        exercises: List[Exercise] = []
        plan_name = DEFAULT_PLAN_NAME
        current_category: Optional[str] = None
        current_day: Optional[str] = None
        in_notes = False

        for raw_line in ai_text.splitlines():
            line = raw_line.strip()
            if not line:
                continue
            plain = _strip_emphasis(line)
            lower = plain.lower()
            is_bullet = bool(BULLET_PATTERN.match(line))

            if PLAN_NAME_MARKER in lower:
                name = plain[lower.index(PLAN_NAME_MARKER) + len(PLAN_NAME_MARKER):].strip()
                if name:
                    plan_name = name
                continue

            if any(marker in lower for marker in NOTES_MARKERS):
                current_category = None
                in_notes = True
                continue

            # Tips/notes bullets are never exercises, even when they name a category
            if in_notes and is_bullet:
                continue

            if is_bullet:
                item = BULLET_PATTERN.sub("", line, count=1).strip()
                inline = INLINE_CATEGORY_PATTERN.match(_strip_emphasis(item))
                if inline:
                    # "- Cardio: Running - 30 mins"
                    current_category = inline.group(1).title()
                    in_notes = False
                    self._add_exercise(exercises, inline.group(2), current_category, current_day)
                    continue

            category = self._match(lower, CATEGORIES)
            if category:
                current_category = category.title()
                in_notes = False
                continue

            day = self._match(lower, WEEKDAYS)
            if day:
                current_day = day.title()
                continue

            if is_bullet and current_category:
                item = BULLET_PATTERN.sub("", line, count=1).strip()
                self._add_exercise(exercises, item, current_category, current_day)

        if not exercises:
            logger.debug("PlanTextParser: plan markers found but no exercises parsed")
            return None

        self._assign_default_days(exercises)

        return Plan(exercises=exercises, plan_name=plan_name, is_valid=True)

    def _match(self, lower_line: str, names: List[str]) -> Optional[str]:
        return next((name for name in names if name in lower_line), None)

    def _add_exercise(self, exercises: List[Exercise], item: str,
                      category: str, day: Optional[str]):
        duration = self.extract_duration(item)
        name = self.clean_name(item)
        if len(name) < MIN_NAME_LENGTH:
            return

        for existing in exercises:
            if (existing.name.lower() == name.lower()
                    and existing.category == category
                    and existing.duration == duration):
                existing.add_day(day)
                return

        exercises.append(Exercise(
            category=category,
            name=name,
            duration=duration,
            days=[day] if day else [],
        ))

    def extract_duration(self, item: str) -> str:
        match = DURATION_PATTERN.search(item)
        if not match:
            return DEFAULT_DURATION
        return f"{match.group(1)} {match.group(2).lower()}"

    def clean_name(self, item: str) -> str:
        name = _strip_emphasis(item)
        name = PARENTHETICAL_PATTERN.sub(" ", name)
        name = DURATION_PATTERN.sub(" ", name)
        name = REPS_SETS_PATTERN.sub(" ", name)
        name = SEPARATOR_PATTERN.sub(" ", name)
        name = re.sub(r"\s+", " ", name)
        return name.strip(" ,.;-")

    def _assign_default_days(self, exercises: List[Exercise]):
        undated = [ex for ex in exercises if not ex.days]
        for index, ex in enumerate(undated):
            ex.days = [DEFAULT_DAY_CYCLE[index % len(DEFAULT_DAY_CYCLE)]]


def validate_plan(plan: Optional[Plan]) -> bool:
    """A plan is storable only if every exercise is fully specified."""
    if plan is None or not plan.exercises:
        return False

    for ex in plan.exercises:
        if not ex.category or not ex.name or not ex.duration:
            return False
        if not ex.days:
            return False

    return True


# Goal phrases the coach tends to use when restating the goal
METADATA_GOAL_KEYWORDS = {
    "weight loss": ["lose weight", "weight loss", "fat loss", "slim down", "get lean"],
    "muscle gain": ["build muscle", "muscle gain", "bulk up", "get bigger", "gain mass"],
    "general fitness": ["stay fit", "general fitness", "maintain fitness", "stay healthy", "get fit"],
    "endurance": ["endurance", "stamina", "cardio fitness"],
    "flexibility": ["flexibility", "stretching", "mobility"],
}

METADATA_WEEKS_PATTERN = re.compile(r"(\d+)\s*(?:weeks|week|wks|wk)\b", re.IGNORECASE)
GOAL_WEIGHT_PATTERN = re.compile(
    r"(?:goal|target)\s*weight\D{0,20}?(\d+(?:\.\d+)?)\s*(?:kg|kgs|kilograms)?",
    re.IGNORECASE,
)


def extract_plan_metadata(text: Optional[str]) -> PlanMetadata:
    """Goal, duration and goal weight as stated in the coach's own reply."""
    metadata = PlanMetadata()
    lower = (text or "").lower()

    for goal, keywords in METADATA_GOAL_KEYWORDS.items():
        if any(k in lower for k in keywords):
            metadata.goal = goal
            break

    weeks_match = METADATA_WEEKS_PATTERN.search(lower)
    if weeks_match:
        metadata.duration_weeks = int(weeks_match.group(1))

    weight_match = GOAL_WEIGHT_PATTERN.search(lower)
    if weight_match:
        metadata.goal_weight = float(weight_match.group(1))

    return metadata


def format_plan_for_database(plan: Plan, user_info: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Database-ready record: plan row fields plus one dict per exercise."""
    user_info = user_info or {}
    return {
        "plan_name": plan.plan_name or DEFAULT_PLAN_NAME,
        "exercises": [ex.to_dict() for ex in plan.exercises],
        "goal": user_info.get("goal"),
        "duration_weeks": user_info.get("duration_weeks"),
        "deadline": user_info.get("deadline"),
        "current_weight": user_info.get("current_weight"),
        "goal_weight": user_info.get("goal_weight"),
    }
