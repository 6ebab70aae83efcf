"""
Chat module for question answering over uploaded PDFs.

This module provides the retrieve-then-generate query pipeline and the
prompts it sends to the chat model.
"""

from pdf_rag.chat.pipeline import QueryPipeline, QueryResult
from pdf_rag.chat.prompts import (
    NO_CONTEXT_MESSAGE,
    NO_RESPONSE_MESSAGE,
    QA_PROMPT,
    SYSTEM_INSTRUCTION,
    build_user_message,
)

__all__ = [
    # Pipeline
    "QueryPipeline",
    "QueryResult",
    # Prompts
    "SYSTEM_INSTRUCTION",
    "QA_PROMPT",
    "NO_CONTEXT_MESSAGE",
    "NO_RESPONSE_MESSAGE",
    "build_user_message",
]
