"""Priority marker extraction (p1..p4, 1 is most urgent)."""

import re
from dataclasses import dataclass
from typing import Optional

_PRIORITY = re.compile(r"\b(p[1-4])\b", re.I)


@dataclass(frozen=True)
class PriorityMatch:
    priority: int
    confidence: float
    matched_text: str


def extract_priority(text: str) -> Optional[PriorityMatch]:
    """Most urgent priority marker in the text, if any."""
    matches = list(_PRIORITY.finditer(text or ""))
    if not matches:
        return None
    best = min(matches, key=lambda m: int(m.group(1)[1]))
    return PriorityMatch(priority=int(best.group(1)[1]), confidence=0.98, matched_text=best.group(0))


def remove_priority_from_text(text: str) -> str:
    """Strip priority markers and collapse the leftover whitespace."""
    stripped = _PRIORITY.sub("", text or "")
    return re.sub(r"\s{2,}", " ", stripped).strip()
