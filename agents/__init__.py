"""FitCoach Agent Module.

Rule-based language components around the coach model.

Agents:
    SlotExtractor: Goal / style / days / timeframe slot filling.
    PlanTextParser: Structured plans out of the model's prose replies.
"""
from agents.slot_extractor import SlotExtractor, extract_deadline
from agents.plan_parser import (
    PlanTextParser,
    validate_plan,
    extract_plan_metadata,
    format_plan_for_database,
)
from agents.prompt_builder import build_prompt

__all__ = [
    "SlotExtractor",
    "extract_deadline",
    "PlanTextParser",
    "validate_plan",
    "extract_plan_metadata",
    "format_plan_for_database",
    "build_prompt",
]
