"""Persistence for approved plans.

Primitives (deactivate, insert plan, insert exercise) all run against a
session obtained from `transaction()`, so a caller composes them into one
all-or-nothing write.
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from models.tables import PlanExercise, UserPlan
from services.database import get_engine, make_session_factory
from tools.deadline import parse_date

logger = logging.getLogger(__name__)


class PlanRepository:
    """SQL-backed plan storage (user_plans + plan_exercises)."""

    def __init__(self, engine: Optional[Engine] = None):
        self._engine = engine
        self._session_factory = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = get_engine()
        return self._engine

    def _new_session(self) -> Session:
        if self._session_factory is None:
            self._session_factory = make_session_factory(self.engine)
        return self._session_factory()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on clean exit; roll back everything on any exception."""
        session = self._new_session()
        try:
            yield session
            session.commit()
        except Exception:
            logger.warning("Rolling back plan transaction")
            session.rollback()
            raise
        finally:
            session.close()

    # === Write primitives (use inside transaction()) ===

    def deactivate_plans(self, db: Session, user_id: str) -> int:
        result = db.execute(
            update(UserPlan)
            .where(UserPlan.user_id == user_id, UserPlan.is_active.is_(True))
            .values(is_active=False)
        )
        return result.rowcount or 0

    def insert_plan(self, db: Session, user_id: str, record: Dict[str, Any]) -> int:
        """Insert the plan row and return its generated plan_id."""
        row = UserPlan(
            user_id=user_id,
            plan_name=record["plan_name"],
            goal=record.get("goal"),
            duration_weeks=record.get("duration_weeks"),
            deadline=parse_date(record.get("deadline")),
            current_weight=record.get("current_weight"),
            goal_weight=record.get("goal_weight"),
            is_active=True,
        )
        db.add(row)
        db.flush()
        return row.plan_id

    def insert_exercise(self, db: Session, plan_id: int, exercise: Dict[str, Any]):
        db.add(PlanExercise(
            plan_id=plan_id,
            category=exercise["category"],
            exercise_name=exercise["name"],
            duration=exercise["duration"],
            days=list(exercise["days"]),
        ))
        db.flush()

    # === Reads ===

    def get_active_plan(self, user_id: str) -> Optional[Dict[str, Any]]:
        """The user's active plan with its exercises, newest first, or None."""
        with self.transaction() as db:
            plan = db.execute(
                select(UserPlan)
                .where(UserPlan.user_id == user_id, UserPlan.is_active.is_(True))
                .order_by(UserPlan.created_at.desc(), UserPlan.plan_id.desc())
                .limit(1)
            ).scalar_one_or_none()

            if plan is None:
                return None

            return {
                "plan_id": plan.plan_id,
                "user_id": plan.user_id,
                "plan_name": plan.plan_name,
                "goal": plan.goal,
                "duration_weeks": plan.duration_weeks,
                "deadline": plan.deadline.isoformat() if plan.deadline else None,
                "current_weight": plan.current_weight,
                "goal_weight": plan.goal_weight,
                "is_active": plan.is_active,
                "exercises": [
                    {
                        "exercise_id": ex.exercise_id,
                        "category": ex.category,
                        "exercise_name": ex.exercise_name,
                        "duration": ex.duration,
                        "days": list(ex.days or []),
                    }
                    for ex in plan.exercises
                ],
            }

    def count_plans(self, user_id: str, active_only: bool = False) -> int:
        with self.transaction() as db:
            query = select(UserPlan).where(UserPlan.user_id == user_id)
            if active_only:
                query = query.where(UserPlan.is_active.is_(True))
            return len(db.execute(query).scalars().all())
