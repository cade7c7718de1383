"""FitCoach Configuration Module.

This module handles LLM configuration and environment settings.

Functions:
    get_gemini_model: Initialize and return a configured Gemini model.
    get_chat_client: Return the chat-completion client used by the orchestrator.
"""
from config.llm import get_gemini_model, get_chat_client, GeminiChatClient

__all__ = ["get_gemini_model", "get_chat_client", "GeminiChatClient"]
