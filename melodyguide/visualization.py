"""Visualization: the scrolling melody-guide window and a whole-performance overlay."""
from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from melodyguide.config import GuideConfig
from melodyguide.pitch import pitch_to_note_name
from melodyguide.session import TickResult
from melodyguide.timeline import PitchEvent, ReferenceNote


_NOTE_COLOR = "green"
_MIC_COLOR = "red"
_NOW_COLOR = "blue"


def _save(fig, output_path: str | Path | None, show: bool) -> None:
    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(str(output_path), dpi=150, bbox_inches="tight", facecolor="white")
    if show:
        plt.show()
    plt.close(fig)


def plot_window(
    result: TickResult,
    config: GuideConfig,
    title: str = "Melody Guide",
    output_path: str | Path | None = None,
    show: bool = False,
) -> None:
    """Draw one display window: staff lines, reference blocks, sung pitch, now cursor.

    The x axis runs from the window start to its end; the y axis covers
    ``config.pitch_range`` semitones from ``config.pitch_offset``.
    """
    low = config.pitch_offset
    high = config.pitch_offset + config.pitch_range
    start = result.window.start

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.set_xlim(0, config.window_seconds)
    ax.set_ylim(low, high)

    # One staff line per semitone
    for p in range(low, high + 1):
        ax.axhline(y=p, color="black", linewidth=0.4, alpha=0.5, zorder=1)

    for note in result.notes:
        # Reference notes outside the displayed pitch range are not drawn
        if not low <= note.pitch < high:
            continue
        ax.add_patch(mpatches.Rectangle(
            (note.time - start, note.pitch), note.duration, 1.0,
            color=_NOTE_COLOR, alpha=0.8, zorder=2,
        ))

    for event in result.events:
        ax.add_patch(mpatches.Rectangle(
            (event.time - start, event.pitch + 0.25), config.tick_interval, 0.5,
            color=_MIC_COLOR, zorder=3,
        ))

    ax.axvline(x=result.elapsed - start, color=_NOW_COLOR, linewidth=1.5, zorder=4)

    yticks = [p for p in range(low, high) if p % 12 == 0]
    ax.set_yticks([p + 0.5 for p in yticks])
    ax.set_yticklabels([pitch_to_note_name(p) for p in yticks], fontsize=8)
    ax.set_xlabel(f"Time (seconds from {start:.1f}s)")

    status = "octave lifted" if result.octave_corrected else "in range"
    if result.octave_corrected is None:
        status = "no voice yet"
    ax.set_title(f"{title}  ·  {status}", fontsize=12, fontweight="bold")
    plt.tight_layout()
    _save(fig, output_path, show)


def plot_performance(
    events: Sequence[PitchEvent],
    notes: Sequence[ReferenceNote],
    title: str = "Performance",
    output_path: str | Path | None = None,
    show: bool = False,
) -> None:
    """Overlay the whole sung pitch contour on the reference melody."""
    if not events and not notes:
        raise ValueError("Nothing to plot: no pitch events and no reference notes.")

    fig, ax = plt.subplots(figsize=(12, 5))

    for note in notes:
        ax.add_patch(mpatches.Rectangle(
            (note.time, note.pitch), note.duration, 1.0,
            color=_NOTE_COLOR, alpha=0.6, zorder=1,
        ))

    if events:
        times = [e.time for e in events]
        pitches = [e.pitch + 0.5 for e in events]
        colors = ["orange" if e.octave_corrected else _MIC_COLOR for e in events]
        ax.scatter(times, pitches, c=colors, s=4, zorder=2)

    all_pitches = [n.pitch for n in notes] + [e.pitch for e in events]
    all_times = [n.time + n.duration for n in notes] + [e.time for e in events]
    ax.set_ylim(int(min(all_pitches)) - 2, int(max(all_pitches)) + 3)
    ax.set_xlim(min(0.0, min(all_times)), max(all_times) + 0.5)
    ax.set_xlabel("Time (seconds)")
    ax.set_ylabel("Pitch")
    ax.set_title(title, fontsize=14, fontweight="bold")

    legend = [
        mpatches.Patch(color=_NOTE_COLOR, alpha=0.6, label="Reference"),
        mpatches.Patch(color=_MIC_COLOR, label="Sung"),
        mpatches.Patch(color="orange", label="Sung (octave lifted)"),
    ]
    ax.legend(handles=legend, loc="upper right", fontsize=8)
    plt.tight_layout()
    _save(fig, output_path, show)
