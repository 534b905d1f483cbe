from __future__ import annotations

from typing import Any


# Threshold presets. "balanced" is the canonical tuning; the other two keep the
# values used by earlier revisions of the heuristics.
#
# Notes:
# - ear_threshold: both eyes below this EAR => closed eyes
# - gaze_score_threshold: indicator score needed to flag "looking away"
# - blur_threshold: blur score (0..100) below which a photo is blurry


PRESETS: dict[str, dict[str, Any]] = {
    # Flags more photos: keeps fewer false "good" shots in the selection.
    "strict": {
        "ear_threshold": 0.23,
        "gaze_score_threshold": 3,
        "blur_threshold": 25.0,
    },
    "balanced": {
        "ear_threshold": 0.21,
        "gaze_score_threshold": 3,
        "blur_threshold": 20.0,
    },
    # Flags fewer photos: squinting and soft focus are tolerated.
    "lenient": {
        "ear_threshold": 0.18,
        "gaze_score_threshold": 4,
        "blur_threshold": 15.0,
    },
}


PRESET_LABELS: dict[str, str] = {
    "strict": "Strict",
    "balanced": "Balanced",
    "lenient": "Lenient",
}


def list_presets() -> list[dict[str, Any]]:
    return [
        {
            "id": preset_id,
            "label": PRESET_LABELS.get(preset_id, preset_id),
            "settings": PRESETS[preset_id],
        }
        for preset_id in PRESETS.keys()
    ]


def preset_patch(preset_id: str) -> dict[str, Any]:
    if preset_id not in PRESETS:
        raise KeyError(preset_id)
    return dict(PRESETS[preset_id])
