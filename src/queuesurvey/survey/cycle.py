from __future__ import annotations

"""Per-cycle queue counters and the survey row they produce."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Placeholder written in place of an average gap when a cycle had fewer than two departures.
NO_GAP = "-"


@dataclass
class ExitTimeLog:
    """Frame indices at which vehicles departed during the current GREEN."""

    frames: List[int] = field(default_factory=list)

    def record(self, frame_idx: int) -> None:
        self.frames.append(int(frame_idx))

    def clear(self) -> None:
        self.frames = []

    def __len__(self) -> int:
        return len(self.frames)

    def average_gap(self, frame_rate: float) -> Optional[float]:
        """Mean interval between consecutive departures, in seconds.

        Returns None when fewer than two departures were recorded; a genuine
        zero gap (two departures on the same frame) is returned as 0.0.
        """
        if len(self.frames) < 2:
            return None
        ordered = sorted(self.frames)
        gaps = [b - a for a, b in zip(ordered, ordered[1:])]
        return (sum(gaps) / len(gaps)) / float(frame_rate)


@dataclass(frozen=True)
class SurveyRow:
    """One completed signal cycle."""

    cycle_number: int
    timestamp: float
    ni: int
    nr: int
    ng: int
    no: int
    avg_gap: Optional[float] = None
    start_hour: int = 0

    @property
    def nb(self) -> int:
        """Back of queue, always Nr + Ng."""
        return self.nr + self.ng

    def clock(self) -> str:
        """Emission time as HH:MM:SS, offset by the survey start hour."""
        total = int(self.timestamp)
        hours = self.start_hour + total // 3600
        minutes = (total % 3600) // 60
        seconds = total % 60
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle": self.cycle_number,
            "time": self.clock(),
            "timestamp": round(float(self.timestamp), 3),
            "Ni": self.ni,
            "Nr": self.nr,
            "Ng": self.ng,
            "Nb": self.nb,
            "No": self.no,
            "avgGap": round(self.avg_gap, 1) if self.avg_gap is not None else NO_GAP,
        }


@dataclass
class CycleAccumulator:
    """Counters for the signal cycle in progress.

    Opened at GREEN start, fed by tracker arrivals and departures during GREEN,
    closed at the next RED start into a SurveyRow. The overflow of a closed
    cycle is carried as the next cycle's Ni.
    """

    ni: int = 0
    nr: int = 0
    arrivals: int = 0
    no: int = 0
    cycles_done: int = 0
    exits: ExitTimeLog = field(default_factory=ExitTimeLog)

    @property
    def nb(self) -> int:
        return self.nr + self.arrivals

    def reset(self) -> None:
        """Drop the open cycle and all carried state."""
        self.ni = 0
        self.nr = 0
        self.arrivals = 0
        self.no = 0
        self.exits.clear()

    def record_arrival(self) -> None:
        self.arrivals += 1

    def record_exit(self, frame_idx: int) -> None:
        self.exits.record(frame_idx)

    def open_green(self, nr: int) -> None:
        """Start the GREEN window with a fresh queue snapshot."""
        self.nr = int(nr)
        self.arrivals = 0
        self.exits.clear()

    def close(self, overflow: int, *, timestamp: float, frame_rate: float, start_hour: int = 0) -> SurveyRow:
        """Finish the cycle at RED start and carry the overflow forward."""
        self.no = int(overflow)
        self.cycles_done += 1
        row = SurveyRow(
            cycle_number=self.cycles_done,
            timestamp=float(timestamp),
            ni=self.ni,
            nr=self.nr,
            ng=self.arrivals,
            no=self.no,
            avg_gap=self.exits.average_gap(frame_rate),
            start_hour=int(start_hour),
        )
        self.ni = self.no
        self.nr = 0
        self.arrivals = 0
        self.no = 0
        self.exits.clear()
        return row
