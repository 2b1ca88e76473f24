"""Small runnable samples: tool-calling chat, embeddings, single agents."""

from reportflow.samples.agents import run_agent, run_role
from reportflow.samples.chat import ask_today, run_chat
from reportflow.samples.embeddings import SAMPLE_PAIRS, cosine_similarity, run_embeddings

__all__ = [
    "ask_today",
    "run_chat",
    "cosine_similarity",
    "run_embeddings",
    "SAMPLE_PAIRS",
    "run_agent",
    "run_role",
]
