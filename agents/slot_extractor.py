"""SlotExtractor - Rule-Based Plan Slot Filling

Pulls the four plan slots out of a free-text user message:
goal, workout style, training days per week, and deadline / timeframe.

Design Decisions:
    1. Ordered rule tables: every classification is a (label -> keywords) table
       evaluated in a fixed order, so results are deterministic.
    2. Goal is first-hit: goals are checked in priority order and the scan
       stops at the first category with a matching keyword.
    3. Style is union: all style groups are evaluated; two or more matches
       collapse to "Mixed".
    4. Pure: no state, no LLM. The orchestrator decides what to merge.
"""
from typing import Dict, List, Optional
import re
import logging
from models.session import GatheredInfo

logger = logging.getLogger(__name__)

# Goal categories in priority order (first hit wins)
GOAL_KEYWORDS = {
    "weight loss": ["lose weight", "weight loss", "fat loss", "burn fat", "slim down", "get lean"],
    "muscle gain": ["build muscle", "muscle gain", "gain muscle", "bulk up", "get bigger", "gain mass"],
    "general fitness": ["general fitness", "stay fit", "get fit", "stay healthy", "maintain fitness"],
    "endurance": ["endurance", "stamina"],
    "flexibility": ["flexibility", "more flexible", "mobility"],
}

# Workout style groups (all evaluated; 2+ matches -> "Mixed")
STYLE_KEYWORDS = {
    "Cardio": ["cardio", "running", "jogging", "brisk walk", "jump rope"],
    "Yoga": ["yoga"],
    "Strength Training": ["strength", "weights", "weight training", "lifting"],
    "Core Exercises": ["core", "abs"],
    "Stretching": ["stretch"],
    "Pilates": ["pilates"],
    "Cycling": ["cycling", "bike", "biking", "spinning"],
    "Swimming": ["swim"],
    "Mixed": ["mixed", "a mix", "variety", "combination", "bit of everything"],
}

MIXED_STYLE = "Mixed"

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

DAYS_PATTERN = re.compile(r"(\d+)\s*(?:days|day|times|time)\b", re.IGNORECASE)
WEEKS_PATTERN = re.compile(r"(?:in\s*)?(\d{1,2})\s*(?:weeks|week|wks|wk)\b", re.IGNORECASE)
ISO_DATE_PATTERN = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")


def _mentions(text: str, keyword: str) -> bool:
    """Substring match against the lower-cased message."""
    return keyword in text


def extract_deadline(message: Optional[str]) -> GatheredInfo:
    """Timeframe slots only: weeks ("in 8 weeks") or an ISO date, never both."""
    text = (message or "").lower()

    weeks_match = WEEKS_PATTERN.search(text)
    if weeks_match:
        return GatheredInfo(duration_weeks=int(weeks_match.group(1)))

    date_match = ISO_DATE_PATTERN.search(text)
    if date_match:
        return GatheredInfo(deadline=date_match.group(1))

    return GatheredInfo()


class SlotExtractor:
    """Maps a raw user message to a partial GatheredInfo."""

    def extract(self, message: Optional[str]) -> GatheredInfo:
        text = (message or "").lower()

        info = extract_deadline(text)
        info.goal = self._extract_goal(text)
        info.workout_style = self._extract_style(text)
        info.days = self._extract_days(text)

        if not info.is_empty():
            logger.debug(f"SlotExtractor: {info.to_dict()}")
        return info

    def _extract_goal(self, text: str) -> Optional[str]:
        for goal, keywords in GOAL_KEYWORDS.items():
            if any(_mentions(text, k) for k in keywords):
                return goal
        return None

    def _extract_style(self, text: str) -> Optional[str]:
        matched = self.matching_styles(text)
        if len(matched) > 1:
            return MIXED_STYLE
        if matched:
            return matched[0]
        return None

    def matching_styles(self, text: str) -> List[str]:
        """All style groups mentioned in the (lower-cased) text, in table order."""
        return [
            style for style, keywords in STYLE_KEYWORDS.items()
            if any(_mentions(text, k) for k in keywords)
        ]

    def _extract_days(self, text: str) -> Optional[int]:
        # "3 days a week" / "4 times" takes precedence over named weekdays
        match = DAYS_PATTERN.search(text)
        if match:
            days = int(match.group(1))
            if 1 <= days <= 7:
                return days

        named = self.named_weekdays(text)
        return len(named) or None

    def named_weekdays(self, text: str) -> List[str]:
        return [day for day in WEEKDAYS if _mentions(text, day)]


def extraction_summary(info: GatheredInfo) -> Dict[str, object]:
    """Only the slots that were actually found (for logging)."""
    return {k: v for k, v in info.to_dict().items() if v is not None}
