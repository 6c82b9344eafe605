"""
RAG Module - Question routing and answer generation.
====================================================

- prompts: System prompts and the intent classifier
- llm: Chat completion interface and Gemini client
- router: Direct lookup vs. vector search + LLM

Flow:
    Question → Router → Direct lookup | Vector query → LLM → Answer
"""

from catalog_chat.rag.llm import ChatCompletionClient, GeminiChatClient
from catalog_chat.rag.prompts import (
    GENERIC_SYSTEM_PROMPT,
    SYSTEM_PROMPTS,
    build_matches_prompt,
    classify_intent,
    generate_system_message,
)
from catalog_chat.rag.router import Router

__all__ = [
    "ChatCompletionClient",
    "GeminiChatClient",
    "GENERIC_SYSTEM_PROMPT",
    "SYSTEM_PROMPTS",
    "build_matches_prompt",
    "classify_intent",
    "generate_system_message",
    "Router",
]
