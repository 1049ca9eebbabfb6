"""LLM module -- model-agnostic verdict generation."""

from truthseek.llm.base import BaseLLM
from truthseek.llm.verdict import VerdictLLM

__all__ = ["BaseLLM", "VerdictLLM"]
