"""Model gateway and generation adapters."""

from .base import GenerationAdapter, OfflineAdapter
from .gateway import ModelGateway, looks_like_refusal

__all__ = [
    "GenerationAdapter",
    "ModelGateway",
    "OfflineAdapter",
    "looks_like_refusal",
]
