"""Group-photo classification from object detections.

Counts the detector's `person` instances above a confidence floor. No overlap
deduplication or pose reasoning: the detector's instance count is taken as-is.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from fastgrapher.core.types import Detection

PERSON_LABEL = "person"


@dataclass
class GroupConfig:
    """Configuration for the group-photo decision."""

    # Detections must be strictly above this confidence to count.
    min_confidence: float = 0.5
    min_persons: int = 4


def count_persons(detections: Iterable[Detection], config: GroupConfig | None = None) -> int:
    """Return the number of confident `person` detections."""

    cfg = config or GroupConfig()
    return sum(
        1
        for d in detections
        if d.class_label == PERSON_LABEL and d.confidence > cfg.min_confidence
    )


def is_group_photo(detections: Iterable[Detection], config: GroupConfig | None = None) -> bool:
    """Return True when the photo holds at least `min_persons` people."""

    cfg = config or GroupConfig()
    return count_persons(detections, cfg) >= cfg.min_persons
