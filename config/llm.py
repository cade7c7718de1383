"""LLM Configuration for the FitCoach workout planner.

This module handles Gemini model initialization with appropriate safety settings
and exposes the chat-completion callable the orchestrator talks to.
"""
import logging
from typing import Dict, List, Optional
import google.generativeai as genai
from config.settings import (
    GOOGLE_API_KEY,
    GEMINI_MODEL_NAME,
    LLM_TEMPERATURE,
    LLM_MAX_OUTPUT_TOKENS,
)

logger = logging.getLogger(__name__)

# Standard safety settings for a fitness assistant
SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]


def get_gemini_model(model_name: str = GEMINI_MODEL_NAME, system_instruction: Optional[str] = None):
    """
    Configures and returns a Gemini model instance.

    Args:
        model_name: Gemini model to use (default: gemini-2.0-flash)
        system_instruction: Optional system prompt bound to the model.

    Returns:
        GenerativeModel instance or None if API key is missing.
    """
    if not GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY not set. AI features will be disabled.")
        return None

    genai.configure(api_key=GOOGLE_API_KEY)

    model = genai.GenerativeModel(
        model_name=model_name,
        safety_settings=SAFETY_SETTINGS,
        system_instruction=system_instruction,
    )
    return model


def to_gemini_contents(history: List[Dict[str, str]]) -> List[Dict]:
    """Map {role, content} turns to Gemini's {role, parts} format."""
    contents = []
    for turn in history:
        role = "model" if turn.get("role") in ("assistant", "model") else "user"
        contents.append({"role": role, "parts": [turn.get("content", "")]})
    return contents


class GeminiChatClient:
    """Chat completion over Gemini: complete(system_prompt, history) -> text.

    A new GenerativeModel is bound per call because the system prompt changes
    with the conversation state.
    """

    def __init__(self, model_name: str = GEMINI_MODEL_NAME):
        self.model_name = model_name

    def __call__(self, system_prompt: str, history: List[Dict[str, str]]) -> str:
        return self.complete(system_prompt, history)

    def complete(self, system_prompt: str, history: List[Dict[str, str]]) -> str:
        model = get_gemini_model(self.model_name, system_instruction=system_prompt)
        if model is None:
            raise RuntimeError("GOOGLE_API_KEY not configured")

        response = model.generate_content(
            to_gemini_contents(history),
            generation_config={
                "temperature": LLM_TEMPERATURE,
                "max_output_tokens": LLM_MAX_OUTPUT_TOKENS,
            },
        )
        return response.text


def get_chat_client() -> Optional[GeminiChatClient]:
    """Return a chat client, or None when no API key is configured."""
    if not GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY not set. AI features will be disabled.")
        return None
    return GeminiChatClient()
