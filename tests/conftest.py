import pytest
from sqlalchemy import create_engine

from models.session import UserProfile
from services.conversation_store import ConversationStore
from services.database import init_db
from services.plan_repository import PlanRepository


SAMPLE_PLAN_REPLY = """Here is your personalized workout plan!

Plan Name: **Cardio Kickstart**

**Monday:**
- Cardio: Brisk Walking - 30 mins
- Stretching: Hamstring stretch - 10 mins

**Wednesday:**
- Cardio: Brisk Walking - 30 mins
- Core Exercises: Plank - 60 seconds

**Tips:**
- Warm up with light cardio for 5 mins

Would you like to approve this plan? Reply 'Yes' to save it, or 'No' to request changes."""


class FakeLLM:
    """complete(system_prompt, history) -> text, replaying canned replies."""

    def __init__(self, replies=None, default="Got it! Tell me more."):
        self.replies = list(replies or [])
        self.default = default
        self.calls = []

    def __call__(self, system_prompt, history):
        self.calls.append({"system_prompt": system_prompt, "history": [dict(m) for m in history]})
        if self.replies:
            return self.replies.pop(0)
        return self.default


@pytest.fixture
def store():
    return ConversationStore()


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine):
    return PlanRepository(engine)


@pytest.fixture
def profile():
    return UserProfile(height=170, weight=90, gender="male", birthdate="1990-01-01")
