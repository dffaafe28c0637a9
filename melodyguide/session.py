"""Per-tick driver tying the spectral source, estimator and timeline together."""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable

from melodyguide.config import GuideConfig
from melodyguide.estimation import PitchEstimator, SpectralFrame
from melodyguide.melody import Melody
from melodyguide.timeline import (
    NotStartedError, PerformanceTimeline, PitchEvent, ReferenceNote, TimeWindow, window_at,
)


logger = logging.getLogger(__name__)


class PlaybackState(enum.Enum):
    """States reported by the playback transport."""
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


@dataclass
class TickResult:
    """Everything the renderer needs to draw one frame."""
    frequency_hz: float | None
    level: float
    window: TimeWindow
    notes: list[ReferenceNote]
    events: list[PitchEvent]
    elapsed: float
    octave_corrected: bool | None
    event: PitchEvent | None = None

    @property
    def voiced(self) -> bool:
        return self.frequency_hz is not None


class GuideSession:
    """Runs analysis ticks for one singer against one reference melody.

    *source* is called once per tick and must return the latest spectral
    frame; the audio collaborator refreshes it between ticks. The external
    timer should call :meth:`tick` every ``config.tick_interval`` seconds
    while :attr:`is_active` is true.
    """

    def __init__(
        self,
        config: GuideConfig,
        source: Callable[[], SpectralFrame],
        melody: Melody,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.source = source
        self.estimator = PitchEstimator(config)
        self.timeline = PerformanceTimeline(
            melody.notes,
            window_length=config.window_seconds,
            octave_floor=config.octave_floor,
            clock=clock,
        )
        self.state: PlaybackState | None = None

    @property
    def is_active(self) -> bool:
        return self.state is PlaybackState.PLAYING

    @property
    def tick_interval(self) -> float:
        return self.config.tick_interval

    def handle_state(self, state: PlaybackState) -> None:
        """React to a playback transport state change."""
        logger.debug("Playback state %s -> %s", self.state, state)
        self.state = state
        if state is PlaybackState.PLAYING:
            self.timeline.start()

    def tick(self) -> TickResult:
        """Analyse the current frame, record its pitch and snapshot the window."""
        if not self.timeline.is_running:
            raise NotStartedError("Playback has not started yet")

        frame = self.source()
        if frame.sample_rate != self.config.sample_rate or frame.fft_size != self.config.fft_size:
            raise ValueError(
                f"Frame ({frame.sample_rate} Hz, fft {frame.fft_size}) does not match "
                f"configuration ({self.config.sample_rate} Hz, fft {self.config.fft_size})"
            )
        frequency = self.estimator.estimate(frame)
        event = None
        if frequency is not None:
            event = self.timeline.add_sample(frequency)

        elapsed = self.timeline.elapsed()
        window = window_at(elapsed, self.timeline.window_length)
        return TickResult(
            frequency_hz=frequency,
            level=self.estimator.level(frame),
            window=window,
            notes=list(self.timeline.notes_in_window(window)),
            events=list(self.timeline.events_in_window(window)),
            elapsed=elapsed,
            octave_corrected=self.timeline.octave_corrected,
            event=event,
        )
