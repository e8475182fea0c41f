"""Western zodiac reference data."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class ZodiacSign:
    id: str
    name: str
    symbol: str
    element: str
    dates: str
    traits: tuple[str, ...]


ZODIAC_SIGNS: tuple[ZodiacSign, ...] = (
    ZodiacSign("aries", "Aries", "♈", "Fire", "Mar 21 - Apr 19",
               ("Energetic", "Courageous", "Independent", "Passionate")),
    ZodiacSign("taurus", "Taurus", "♉", "Earth", "Apr 20 - May 20",
               ("Reliable", "Patient", "Practical", "Devoted")),
    ZodiacSign("gemini", "Gemini", "♊", "Air", "May 21 - Jun 20",
               ("Adaptable", "Curious", "Communicative", "Witty")),
    ZodiacSign("cancer", "Cancer", "♋", "Water", "Jun 21 - Jul 22",
               ("Intuitive", "Emotional", "Protective", "Nurturing")),
    ZodiacSign("leo", "Leo", "♌", "Fire", "Jul 23 - Aug 22",
               ("Confident", "Generous", "Creative", "Dramatic")),
    ZodiacSign("virgo", "Virgo", "♍", "Earth", "Aug 23 - Sep 22",
               ("Analytical", "Practical", "Perfectionist", "Helpful")),
    ZodiacSign("libra", "Libra", "♎", "Air", "Sep 23 - Oct 22",
               ("Diplomatic", "Balanced", "Social", "Artistic")),
    ZodiacSign("scorpio", "Scorpio", "♏", "Water", "Oct 23 - Nov 21",
               ("Intense", "Mysterious", "Passionate", "Transformative")),
    ZodiacSign("sagittarius", "Sagittarius", "♐", "Fire", "Nov 22 - Dec 21",
               ("Adventurous", "Optimistic", "Philosophical", "Freedom-loving")),
    ZodiacSign("capricorn", "Capricorn", "♑", "Earth", "Dec 22 - Jan 19",
               ("Ambitious", "Disciplined", "Responsible", "Traditional")),
    ZodiacSign("aquarius", "Aquarius", "♒", "Air", "Jan 20 - Feb 18",
               ("Independent", "Innovative", "Humanitarian", "Eccentric")),
    ZodiacSign("pisces", "Pisces", "♓", "Water", "Feb 19 - Mar 20",
               ("Intuitive", "Compassionate", "Artistic", "Dreamy")),
)

SIGN_NAMES: tuple[str, ...] = tuple(s.name for s in ZODIAC_SIGNS)

_BY_KEY = {s.id: s for s in ZODIAC_SIGNS}


def get_sign(name: str) -> ZodiacSign:
    """Look up a sign by id or display name, case-insensitively.

    Raises:
        ValueError: If the name is not one of the twelve signs.
    """
    key = name.strip().lower() if isinstance(name, str) else ""
    try:
        return _BY_KEY[key]
    except KeyError:
        raise ValueError(
            f"Unknown zodiac sign {name!r}; expected one of {', '.join(SIGN_NAMES)}"
        ) from None
