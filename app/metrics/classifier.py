"""Presentation rating derived from rule score and speed index."""

import math
from dataclasses import dataclass

# (minimum rule score, maximum speed index, stars); first match wins
STAR_RULES: tuple[tuple[float, float, int], ...] = (
    (90, 1000, 5),
    (80, 2000, 4),
    (70, 3000, 3),
    (50, 5000, 2),
)
FALLBACK_STARS = 1
NEUTRAL_STARS = 0

RATINGS: dict[int, tuple[str, str]] = {
    5: ("excellent", "Your page is really fast!"),
    4: ("good", "Your page is fast"),
    3: ("average", "Your page could be faster"),
    2: ("poor", "Your page is slow"),
    1: ("bad", "Your page is really slow"),
    0: ("unknown", "We could not rate your page"),
}


@dataclass(frozen=True)
class Classification:
    stars: int
    body_id: str
    box_title: str


def classify(rule_score: object, speed_index: object) -> Classification:
    """Rate a page. Total: any missing or non-numeric input yields the neutral rating."""
    score = _as_number(rule_score)
    index = _as_number(speed_index)
    if score is None or index is None:
        stars = NEUTRAL_STARS
    else:
        stars = next(
            (s for min_score, max_index, s in STAR_RULES if score >= min_score and index <= max_index),
            FALLBACK_STARS,
        )
    body_id, box_title = RATINGS[stars]
    return Classification(stars=stars, body_id=body_id, box_title=box_title)


def _as_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value):
        return None
    return float(value)
