"""Performance timeline: clock, recorded pitch events, and window bucketing."""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Sequence

from melodyguide.pitch import DEFAULT_OCTAVE_FLOOR, correct_octave, frequency_to_pitch


logger = logging.getLogger(__name__)


class NotStartedError(RuntimeError):
    """Raised when the timeline is used before a performance was started."""
    pass


@dataclass(frozen=True)
class ReferenceNote:
    """A note of the reference melody."""
    time: float
    pitch: int
    duration: float


@dataclass(frozen=True)
class PitchEvent:
    """A pitch sung at *time* seconds into the performance."""
    time: float
    pitch: float
    octave_corrected: bool = False


@dataclass(frozen=True)
class TimeWindow:
    """Half-open display interval ``[start, end)``."""
    start: float
    end: float

    @property
    def length(self) -> float:
        return self.end - self.start

    def __contains__(self, t: float) -> bool:
        return self.start <= t < self.end


def window_at(t: float, window_length: float) -> TimeWindow:
    """The window of width *window_length* that contains *t*."""
    k = math.floor(t / window_length)
    # Float division can land one step off at exact multiples
    if k * window_length > t:
        k -= 1
    elif (k + 1) * window_length <= t:
        k += 1
    start = k * window_length
    return TimeWindow(start, start + window_length)


class PerformanceTimeline:
    """Owns the clock and event log of one singer against one reference melody.

    Idle until :meth:`start`; every other operation raises
    :class:`NotStartedError` while idle. Calling :meth:`start` again begins a
    new performance with an empty log.
    """

    def __init__(
        self,
        notes: Sequence[ReferenceNote],
        window_length: float = 4.0,
        octave_floor: float = DEFAULT_OCTAVE_FLOOR,
        clock: Callable[[], float] = time.monotonic,
    ):
        if window_length <= 0:
            raise ValueError(f"window_length must be positive, got {window_length}")
        self.notes: tuple[ReferenceNote, ...] = tuple(notes)
        self.window_length = window_length
        self.octave_floor = octave_floor
        self._clock = clock
        self._start_time: float | None = None
        self._events: list[PitchEvent] = []
        self._octave_corrected: bool | None = None

    @property
    def is_running(self) -> bool:
        return self._start_time is not None

    @property
    def events(self) -> tuple[PitchEvent, ...]:
        """Recorded events in time order."""
        return tuple(self._events)

    @property
    def octave_corrected(self) -> bool | None:
        """Whether the latest sample was octave-corrected; None before any sample."""
        return self._octave_corrected

    def start(self) -> None:
        self._start_time = self._clock()
        self._events = []
        self._octave_corrected = None
        logger.debug("Performance started (%d reference notes)", len(self.notes))

    def elapsed(self) -> float:
        """Seconds since the performance started."""
        if self._start_time is None:
            raise NotStartedError("No active performance; call start() first")
        return max(0.0, self._clock() - self._start_time)

    def add_sample(self, frequency_hz: float) -> PitchEvent:
        """Record the pitch of *frequency_hz* at the current elapsed time."""
        now = self.elapsed()
        pitch, corrected = correct_octave(frequency_to_pitch(frequency_hz), self.octave_floor)
        if corrected:
            logger.debug("Octave-corrected %.1f Hz to pitch %.2f", frequency_hz, pitch)
        if self._events and now < self._events[-1].time:
            now = self._events[-1].time
        event = PitchEvent(time=now, pitch=pitch, octave_corrected=corrected)
        self._events.append(event)
        self._octave_corrected = corrected
        return event

    def current_window(self) -> TimeWindow:
        return window_at(self.elapsed(), self.window_length)

    def notes_in_window(self, window: TimeWindow | None = None) -> Iterator[ReferenceNote]:
        """Reference notes starting inside the current (or given) window."""
        if window is None:
            window = self.current_window()
        return (note for note in self.notes if note.time in window)

    def events_in_window(self, window: TimeWindow | None = None) -> Iterator[PitchEvent]:
        """Recorded events inside the current (or given) window."""
        if window is None:
            window = self.current_window()
        return (event for event in self._events if event.time in window)
