"""Reference melody ("silhouette") loading."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from melodyguide.timeline import ReferenceNote


logger = logging.getLogger(__name__)


class MelodyFormatError(ValueError):
    """Raised when a silhouette document cannot be turned into reference notes."""
    pass


@dataclass
class Melody:
    """Delay-shifted reference notes of one track."""
    notes: list[ReferenceNote]
    delay: float = 0.0

    @property
    def end_time(self) -> float:
        """Time at which the last note stops sounding."""
        return max((n.time + n.duration for n in self.notes), default=0.0)


def shift_notes(notes: Iterable[ReferenceNote], delay: float) -> list[ReferenceNote]:
    """Return copies of *notes* moved *delay* seconds later."""
    return [ReferenceNote(time=n.time + delay, pitch=n.pitch, duration=n.duration)
            for n in notes]


def _parse_note(raw: Any, index: int) -> ReferenceNote:
    try:
        note = ReferenceNote(
            time=float(raw["time"]),
            pitch=int(raw["midi"]),
            duration=float(raw["duration"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise MelodyFormatError(f"Note {index} is malformed: {raw!r}") from e
    if note.duration < 0:
        raise MelodyFormatError(f"Note {index} has negative duration {note.duration}")
    return note


def parse_silhouette(data: dict, track: int = 0) -> Melody:
    """Build a :class:`Melody` from a decoded silhouette document.

    The document looks like::

        {"delay": 1.5,
         "tracks": [{"notes": [{"time": 0.0, "midi": 64, "duration": 0.5}, ...]}]}

    Notes must be ordered by time. The delay is applied exactly once; *data*
    itself is left untouched.
    """
    try:
        delay = float(data.get("delay", 0.0))
        raw_notes = data["tracks"][track]["notes"]
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
        raise MelodyFormatError(f"Track {track} not found in silhouette") from e

    notes = [_parse_note(raw, i) for i, raw in enumerate(raw_notes)]
    for prev, cur in zip(notes, notes[1:]):
        if cur.time < prev.time:
            raise MelodyFormatError(
                f"Notes are not ordered by time ({cur.time} after {prev.time})"
            )
    return Melody(notes=shift_notes(notes, delay), delay=delay)


def load_silhouette(path: str | Path, track: int = 0) -> Melody:
    """Read a silhouette JSON file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Silhouette file not found: {path}")
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MelodyFormatError(f"{path} is not valid JSON: {e}") from e
    melody = parse_silhouette(data, track)
    logger.debug("Loaded %d notes from %s (delay %.2fs)", len(melody.notes), path, melody.delay)
    return melody
