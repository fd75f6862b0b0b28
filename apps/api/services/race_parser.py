"""
Race Result Parser

Best-effort extraction of race results from free-form text, e.g.

    "10k em 45:00, meia 21km 1h40m"   ->  [10k in 45:00, 21k in 1:40:00]

This is a token scanner, not a grammar: each distance token ("5k", "10km",
"21.1k", "10 km") is paired with the first time-like token found in the
next few tokens. Anything it can't pair is ignored; malformed input yields
an empty list, never an exception.

Kept separate from the physiology code so a structured input form can
replace it without touching vdot_calculator.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

# Tokens examined after a distance token
LOOKAHEAD_TOKENS = 5

# Bare numbers at or above this are minutes, below it seconds
BARE_NUMBER_MINUTES_THRESHOLD = 10

_DISTANCE_TOKEN_RE = re.compile(r"(?<![\d.,])(\d+(?:[.,]\d+)?)\s*(?:km|k)(?![a-z])")
_SPLIT_DISTANCE_RE = re.compile(r"(\d)\s+(km|k)\b", re.IGNORECASE)

_TIME_CANDIDATE_RE = re.compile(
    r"\d{1,2}:\d{2}(?::\d{2})?"
    r"|\d+\s*h(?:\s*\d+\s*(?:min|m)?)?(?:\s*\d+\s*s)?"
    r"|\d+\s*(?:min|m)(?:\s*\d+\s*s)?"
    r"|\d+\s*s"
    r"|\b\d+\b"
)

_CLOCK_RE = re.compile(r"(\d{1,2}):(\d{2})(?::(\d{2}))?")
_UNITS_RE = re.compile(r"(?:(\d+)\s*h)?\s*(?:(\d+)\s*(?:min|m))?\s*(?:(\d+)\s*s)?")
_HOURS_MINUTES_RE = re.compile(r"(\d+)\s*h\s*(\d{1,2})")


@dataclass
class RaceSample:
    """A single performance: distance in meters, time in seconds."""
    distance_meters: float
    time_seconds: int
    label: str = ""


def time_string_to_seconds(value: str) -> Optional[int]:
    """
    Convert a time token to seconds.

    Supports "45:00", "1:40:30", "1h40", "1h40m", "1h40m30s", "45m",
    "45min", "3600s" and bare numbers ("90" -> 90 minutes, "9" -> 9 seconds).
    Returns None when the token is not a time.
    """
    s = value.strip().lower()
    if not s:
        return None

    m = _CLOCK_RE.fullmatch(s)
    if m:
        first, second, third = m.groups()
        if third is not None:
            return int(first) * 3600 + int(second) * 60 + int(third)
        return int(first) * 60 + int(second)

    m = _HOURS_MINUTES_RE.fullmatch(s)
    if m:
        return int(m.group(1)) * 3600 + int(m.group(2)) * 60

    m = _UNITS_RE.fullmatch(s)
    if m and any(m.groups()):
        hours, minutes, seconds = (int(g) if g else 0 for g in m.groups())
        return hours * 3600 + minutes * 60 + seconds

    if s.isdigit():
        n = int(s)
        return n * 60 if n >= BARE_NUMBER_MINUTES_THRESHOLD else n

    return None


def parse_distance_km_token(token: str) -> Optional[float]:
    """Distance in km for tokens like "5k", "10km", "21.1k", "42,195km"."""
    m = _DISTANCE_TOKEN_RE.search(token.lower())
    if not m:
        return None
    km = float(m.group(1).replace(",", "."))
    return km if km > 0 else None


def _format_label(distance_km: float) -> str:
    return f"{distance_km:g}k"


def extract_race_samples(text: Optional[str]) -> List[RaceSample]:
    """
    Scan free text for (distance, time) pairs.

    The lookahead after a distance token stops early at the next distance
    token, so "5k 10k 45:00" only yields the 10k.
    """
    if not text:
        return []

    tokens = _SPLIT_DISTANCE_RE.sub(r"\1\2", text).split()
    samples: List[RaceSample] = []

    for i, token in enumerate(tokens):
        distance_km = parse_distance_km_token(token)
        if distance_km is None:
            continue

        window = []
        for follower in tokens[i + 1:i + 1 + LOOKAHEAD_TOKENS]:
            if parse_distance_km_token(follower) is not None:
                break
            window.append(follower)

        candidate = _TIME_CANDIDATE_RE.search(" ".join(window).lower())
        if not candidate:
            continue

        seconds = time_string_to_seconds(candidate.group(0))
        if not seconds:
            continue

        samples.append(RaceSample(
            distance_meters=round(distance_km * 1000, 3),
            time_seconds=seconds,
            label=_format_label(distance_km),
        ))

    return samples
