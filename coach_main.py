"""FitCoach - Conversational Workout Plan Builder

Guides a user through a multi-turn dialogue that ends in a structured,
approved workout plan:

- Slot filling (goal, style, days, timeframe) from free text
- A two-pass state machine around every LLM call
- Free-text plan parsing and validation of the model's reply
- Transactional, exactly-once plan approval
"""
import argparse
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from agents.plan_parser import PlanTextParser
from agents.prompt_builder import build_prompt
from agents.slot_extractor import SlotExtractor, extract_deadline, extraction_summary
from config.llm import get_chat_client
from core.errors import InvalidTurnError, LLMServiceError
from core.observability import Tracer, metrics, get_metrics_summary
from core.state_machine import Effect, advance, post_process
from models.session import ConversationState, TurnResult, UserProfile
from services.approval import ApprovalWorkflow
from services.conversation_store import ConversationStore, get_conversation_store
from services.database import init_db
from services.plan_repository import PlanRepository

logger = logging.getLogger(__name__)

# complete(system_prompt, history) -> text
CompletionFn = Callable[[str, List[Dict[str, str]]], str]


def _as_profile(user_profile: Union[UserProfile, Dict[str, Any], None]) -> Optional[UserProfile]:
    if user_profile is None or isinstance(user_profile, UserProfile):
        return user_profile
    return UserProfile.from_dict(user_profile)


class ConversationOrchestrator:
    """
    ORCHESTRATOR: runs one user turn end to end.

    Turn flow:
    1. Validate input (reject before touching any state)
    2. Merge timeframe slots mentioned anywhere in the message
    3. Pre-call pass (advance) and its effects, e.g. committing an approval
    4. Build the stage prompt and call the LLM
    5. Post-call pass (post_process) on the reply, storing a candidate plan

    Attributes:
        store: Per-user conversation state and history.
        llm: complete(system_prompt, history) -> text, or None when unconfigured.
        approvals: ApprovalWorkflow used for both "yes" replies and approve_plan.
    """

    def __init__(self,
                 store: Optional[ConversationStore] = None,
                 llm: Optional[CompletionFn] = None,
                 repository: Optional[PlanRepository] = None,
                 extractor: Optional[SlotExtractor] = None,
                 parser: Optional[PlanTextParser] = None):
        self.store = store if store is not None else get_conversation_store()
        self.llm = llm
        self.repository = repository if repository is not None else PlanRepository()
        self.extractor = extractor if extractor is not None else SlotExtractor()
        self.parser = parser if parser is not None else PlanTextParser()
        self.approvals = ApprovalWorkflow(self.store, self.repository)

    def handle_turn(self, user_id: str, message: str,
                    user_profile: Union[UserProfile, Dict[str, Any], None]) -> TurnResult:
        """Process one user message and return the coach's reply plus state flags."""
        if not user_id:
            raise InvalidTurnError("Missing or invalid userId")
        if not isinstance(message, str) or not message.strip() or user_profile is None:
            raise InvalidTurnError("Missing required fields")
        if self.llm is None:
            raise LLMServiceError("AI service not configured")

        profile = _as_profile(user_profile)

        history = self.store.get_history(user_id)
        history.append({"role": "user", "content": message})

        # Timeframes are picked up in every stage
        timeframe = extract_deadline(message)
        if not timeframe.is_empty():
            self.store.merge_gathered_info(user_id, timeframe)

        state = self._run_pre_call(user_id, message, profile)

        reply = self._complete(build_prompt(profile, state), history)

        history.append({"role": "assistant", "content": reply})
        self.store.save_history(user_id, history)

        outcome = post_process(state, reply, profile, parser=self.parser)
        if outcome.updates:
            state = self.store.merge(user_id, **outcome.updates)
        if outcome.plan_generated:
            metrics.plans_generated += 1
            logger.info(f"User {user_id}: candidate plan stored "
                        f"({len(state.generated_plan.exercises)} exercises)")

        return TurnResult(
            reply=reply,
            conversation_state=state.stage,
            plan_generated=outcome.plan_generated,
            awaiting_approval=outcome.awaiting_approval,
        )

    def _run_pre_call(self, user_id: str, message: str,
                      profile: Optional[UserProfile]) -> ConversationState:
        state = self.store.get(user_id)
        transition = advance(state, message, self.extractor)

        if transition.extracted is not None and not transition.extracted.is_empty():
            logger.info(f"User {user_id}: extracted {extraction_summary(transition.extracted)}")

        for effect in transition.effects:
            if effect == Effect.COMMIT_PLAN:
                self.approvals.approve(user_id, profile)

        if transition.updates:
            return self.store.merge(user_id, **transition.updates)
        return self.store.get(user_id)

    def _complete(self, system_prompt: str, history: List[Dict[str, str]]) -> str:
        try:
            with Tracer("LLMCall", history[-1]["content"] if history else None):
                return self.llm(system_prompt, history)
        except Exception as e:
            logger.error(f"LLM call failed: {e}", exc_info=True)
            raise LLMServiceError("AI service request failed") from e

    def approve_plan(self, user_id: str,
                     user_profile: Union[UserProfile, Dict[str, Any], None] = None) -> int:
        """Explicit approval (outside the chat flow). Returns the new plan id."""
        if not user_id:
            raise InvalidTurnError("Invalid user")
        return self.approvals.approve(user_id, _as_profile(user_profile))

    def get_active_plan(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.repository.get_active_plan(user_id)

    def reset(self, user_id: str):
        self.store.reset(user_id)


def main():
    parser = argparse.ArgumentParser(description="FitCoach workout plan builder")
    parser.add_argument("--user", default="local_user", help="User id for this session")
    parser.add_argument("--weight", type=float, help="Current weight in kg")
    parser.add_argument("--height", type=float, help="Height in cm")
    parser.add_argument("--gender")
    parser.add_argument("--birthdate", help="YYYY-MM-DD")
    parser.add_argument("--equipment", action="store_true")
    args = parser.parse_args()

    print("=== FitCoach: Personalized Workout Plans ===")

    client = get_chat_client()
    if client is None:
        print("Error: GOOGLE_API_KEY not found.")
        return

    init_db()
    coach = ConversationOrchestrator(llm=client)
    profile = UserProfile(
        height=args.height,
        weight=args.weight,
        gender=args.gender,
        birthdate=args.birthdate,
        equipment=args.equipment,
    )

    print("Type 'exit' to quit, 'plan' to see your active plan.\n")

    while True:
        user_input = input("\nYou: ").strip()
        if user_input.lower() in ["exit", "quit"]:
            print("FitCoach: Keep moving! Goodbye.")
            break
        if not user_input:
            continue
        if user_input.lower() == "plan":
            print(f"FitCoach: {coach.get_active_plan(args.user) or 'No active plan yet.'}")
            continue

        result = coach.handle_turn(args.user, user_input, profile)
        print(f"FitCoach: {result.reply}")
        if result.awaiting_approval:
            print("[Plan ready: reply 'yes' to save it or 'no' to change it]")

    logger.info(f"Session metrics: {get_metrics_summary()}")


if __name__ == "__main__":
    main()
