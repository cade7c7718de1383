from tools.deadline import (
    clamp_weeks,
    add_weeks,
    parse_date,
    compute_safe_deadline,
)

__all__ = [
    "clamp_weeks",
    "add_weeks",
    "parse_date",
    "compute_safe_deadline",
]
