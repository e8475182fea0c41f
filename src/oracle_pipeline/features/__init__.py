"""Feature definitions served by the orchestrator.

Each module defines a request type, a schema contract, a prompt template, a
fallback content pool with its recipe, and the `Feature` bundle tying them
together. `FEATURES` maps feature names to those bundles.
"""

from types import MappingProxyType

from oracle_pipeline.orchestrator import Feature

from . import (
    angel_guidance,
    diet_plan,
    horoscope,
    kundli,
    palm_reading,
    premium_consultation,
    puja,
    video_therapy,
    wisdom_quote,
)
from .angel_guidance import AngelGuidanceRequest
from .diet_plan import HealthProfile
from .horoscope import HoroscopeRequest
from .kundli import KundliRequest
from .numerology import life_path_number
from .palm_reading import PalmReadingRequest
from .premium_consultation import ConsultationRequest
from .puja import PujaRequest
from .video_therapy import VideoTherapyRequest
from .wisdom_quote import WisdomQuoteRequest
from .zodiac import SIGN_NAMES, ZODIAC_SIGNS, ZodiacSign, get_sign

FEATURES: MappingProxyType[str, Feature] = MappingProxyType(
    {
        module.FEATURE.name: module.FEATURE
        for module in (
            video_therapy,
            horoscope,
            angel_guidance,
            palm_reading,
            kundli,
            diet_plan,
            puja,
            wisdom_quote,
            premium_consultation,
        )
    }
)

__all__ = [
    "FEATURES",
    "SIGN_NAMES",
    "ZODIAC_SIGNS",
    "AngelGuidanceRequest",
    "ConsultationRequest",
    "HealthProfile",
    "HoroscopeRequest",
    "KundliRequest",
    "PalmReadingRequest",
    "PujaRequest",
    "VideoTherapyRequest",
    "WisdomQuoteRequest",
    "ZodiacSign",
    "get_sign",
    "life_path_number",
]
