"""Prompt templates and the builder that binds requests into them."""

from .builder import JSON_INSTRUCTION, PromptBuilder, PromptTemplate

__all__ = ["JSON_INSTRUCTION", "PromptBuilder", "PromptTemplate"]
