"""Collapse adjacent repeated band labels."""
from __future__ import annotations

from typing import Iterable, List


def collapse_repeats(labels: Iterable[str]) -> List[str]:
    """Drop every label equal to the one kept just before it.

    The detector often fires several barely-overlapping boxes on one physical band, and this
    removes them. A resistor with two genuinely adjacent bands of the same color loses one of
    them here; that trade-off is accepted.
    """

    collapsed: List[str] = []
    for label in labels:
        if not collapsed or label != collapsed[-1]:
            collapsed.append(label)
    return collapsed
