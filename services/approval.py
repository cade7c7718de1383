"""ApprovalWorkflow - commit a pending plan exactly once.

Preconditions are checked against the conversation store before any write.
The write itself is a single transaction: deactivate the user's old plans,
insert the plan row, insert every exercise row. On any failure nothing is
persisted and the conversation stays in awaiting_approval.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from agents.plan_parser import format_plan_for_database
from core.errors import ApprovalError, PersistenceError
from core.observability import Tracer, metrics
from models.session import ConversationStage, Plan, UserProfile
from services.conversation_store import ConversationStore
from services.plan_repository import PlanRepository

logger = logging.getLogger(__name__)


def build_plan_record(plan: Plan, profile: Optional[UserProfile] = None) -> Dict[str, Any]:
    """Database-ready record for a finalized plan."""
    current_weight = plan.current_weight
    if profile is not None and profile.weight is not None:
        current_weight = profile.weight

    return format_plan_for_database(plan, {
        "goal": plan.goal,
        "duration_weeks": plan.duration_weeks,
        "deadline": plan.deadline,
        "current_weight": current_weight,
        "goal_weight": plan.goal_weight,
    })


class ApprovalWorkflow:

    def __init__(self, store: ConversationStore, repository: PlanRepository):
        self.store = store
        self.repository = repository

    def approve(self, user_id: str, user_profile: Optional[UserProfile] = None) -> int:
        """Persist the pending plan and move the user to approved.

        Raises:
            ApprovalError: not in awaiting_approval, or no pending plan.
            PersistenceError: the transaction failed and was rolled back.
        """
        state = self.store.get(user_id)
        if state.stage != ConversationStage.AWAITING_APPROVAL:
            raise ApprovalError("No plan awaiting approval")

        plan = state.generated_plan
        if plan is None:
            raise ApprovalError("No plan found")

        record = build_plan_record(plan, user_profile)

        try:
            with Tracer("ApprovalCommit", user_id):
                plan_id = self._commit(user_id, record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save plan for user {user_id}: {e}", exc_info=True)
            raise PersistenceError("Failed to approve plan") from e

        self.store.merge(user_id, stage=ConversationStage.APPROVED)
        metrics.plans_approved += 1
        logger.info(f"User {user_id}: plan {plan_id} approved with {len(record['exercises'])} exercises")
        return plan_id

    def _commit(self, user_id: str, record: Dict[str, Any]) -> int:
        with self.repository.transaction() as db:
            deactivated = self.repository.deactivate_plans(db, user_id)
            if deactivated:
                logger.info(f"User {user_id}: deactivated {deactivated} previous plan(s)")

            plan_id = self.repository.insert_plan(db, user_id, record)
            for exercise in record["exercises"]:
                self.repository.insert_exercise(db, plan_id, exercise)

        return plan_id
