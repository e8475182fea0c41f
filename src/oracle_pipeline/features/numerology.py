"""Life path numerology from a DD/MM/YYYY birth date."""

from __future__ import annotations

from datetime import datetime

MASTER_NUMBERS = frozenset({11, 22, 33})

LIFE_PATH_MEANINGS: dict[int, str] = {
    1: "The Leader: independent, pioneering and driven to forge your own path.",
    2: "The Peacemaker: sensitive, cooperative and gifted at bringing people together.",
    3: "The Communicator: creative, expressive and radiant with joyful energy.",
    4: "The Builder: grounded, disciplined and devoted to lasting foundations.",
    5: "The Adventurer: curious, free-spirited and energized by change.",
    6: "The Nurturer: caring, responsible and called to serve family and community.",
    7: "The Seeker: introspective, analytical and drawn to spiritual truth.",
    8: "The Powerhouse: ambitious, capable and aligned with material mastery.",
    9: "The Humanitarian: compassionate, wise and here to uplift others.",
    11: "Master Number 11, The Intuitive: a channel for inspiration and insight.",
    22: "Master Number 22, The Master Builder: turning grand visions into reality.",
    33: "Master Number 33, The Master Teacher: healing others through unconditional love.",
}


def parse_birth_date(birth_date: str) -> datetime:
    """Parse a DD/MM/YYYY birth date.

    Raises:
        ValueError: If the text is not a real calendar date in that format.
    """
    try:
        return datetime.strptime(birth_date.strip(), "%d/%m/%Y")
    except (AttributeError, ValueError) as e:
        raise ValueError(f"birth_date must be DD/MM/YYYY, got {birth_date!r}") from e


def reduce_number(total: int) -> int:
    """Sum digits until one digit remains, keeping master numbers."""
    while total > 9 and total not in MASTER_NUMBERS:
        total = sum(int(d) for d in str(total))
    return total


def life_path_number(birth_date: str) -> int:
    """Digit sum of the full birth date, reduced to 1-9, 11, 22 or 33."""
    parsed = parse_birth_date(birth_date)
    digits = parsed.strftime("%d%m%Y")
    return reduce_number(sum(int(d) for d in digits))
