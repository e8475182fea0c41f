"""Fallback content synthesis."""

from .synthesizer import ContentPool, FallbackSynthesizer, Recipe, Sampler

__all__ = ["ContentPool", "FallbackSynthesizer", "Recipe", "Sampler"]
