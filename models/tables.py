"""Relational tables for approved workout plans."""
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""


class UserPlan(Base):
    """One approved plan. At most one plan per user is active at a time."""

    __tablename__ = "user_plans"

    plan_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    plan_name: Mapped[str] = mapped_column(Text, nullable=False)
    goal: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    duration_weeks: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    current_weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    goal_weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    exercises: Mapped[List["PlanExercise"]] = relationship(
        back_populates="plan", order_by="PlanExercise.exercise_id"
    )


class PlanExercise(Base):
    __tablename__ = "plan_exercises"

    exercise_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_id: Mapped[int] = mapped_column(ForeignKey("user_plans.plan_id"), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String, nullable=False)
    exercise_name: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[str] = mapped_column(String, nullable=False)
    days: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    plan: Mapped[UserPlan] = relationship(back_populates="exercises")
