"""Session data model.

A session pairs one clock-in entry with zero or one clock-out entry for the
same employee. Sessions are derived from the entry log on every read and are
never persisted.
"""

import time
from dataclasses import dataclass
from typing import Optional

from shiftledger.models.entry import Entry

MS_PER_MINUTE = 60_000


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class Session:
    """A derived pairing of an in-entry and an optional out-entry.

    The duration of a closed session is fixed by its two timestamps and is
    clamped at zero. An active session (no out-entry) is measured against
    the current time on every read, so its duration changes between reads.
    An orphan session has only an out-entry and always lasts zero minutes.

    Attributes:
        employee: Employee display name
        employee_id: Employee reference
        in_entry: The clock-in entry (None for orphan clock-outs)
        out_entry: The clock-out entry (None while active)
        active: True while the out-entry is absent

    Example:
        >>> session = Session(
        ...     employee="Ana Diaz",
        ...     employee_id="emp-1",
        ...     in_entry=clock_in,
        ...     out_entry=clock_out,
        ...     active=False,
        ... )
        >>> session.duration_minutes()
        90.0
    """

    employee: str
    employee_id: str
    in_entry: Optional[Entry] = None
    out_entry: Optional[Entry] = None
    active: bool = False

    @property
    def is_closed(self) -> bool:
        return self.in_entry is not None and self.out_entry is not None

    @property
    def is_orphan(self) -> bool:
        return self.in_entry is None

    @property
    def site(self) -> Optional[str]:
        """Site of the clock-in, falling back to the clock-out site."""
        if self.in_entry is not None and self.in_entry.site:
            return self.in_entry.site
        if self.out_entry is not None and self.out_entry.site:
            return self.out_entry.site
        return None

    @property
    def start_ts(self) -> int:
        """Anchor timestamp used for ordering (in, else out, else 0)."""
        if self.in_entry is not None:
            return self.in_entry.ts
        if self.out_entry is not None:
            return self.out_entry.ts
        return 0

    def end_ts(self, now: Optional[int] = None) -> int:
        """Effective end timestamp; active sessions end at ``now``."""
        if self.out_entry is not None:
            if self.in_entry is not None:
                return max(self.out_entry.ts, self.in_entry.ts)
            return self.out_entry.ts
        if self.in_entry is not None:
            return max(self.in_entry.ts, now if now is not None else now_ms())
        return 0

    def duration_minutes(self, now: Optional[int] = None) -> float:
        """Duration in minutes, never negative.

        Args:
            now: Reference time in epoch ms for active sessions
                (defaults to the current time)

        Returns:
            Minutes between clock-in and clock-out (or ``now``)
        """
        if self.in_entry is None:
            return 0.0
        return (self.end_ts(now) - self.in_entry.ts) / MS_PER_MINUTE

    def overlap_minutes(
        self, start: Optional[int], end: Optional[int], now: Optional[int] = None
    ) -> float:
        """Minutes of this session inside the window [start, end).

        None bounds are unbounded. Sessions without a readable clock-in
        contribute nothing.
        """
        if self.in_entry is None or not isinstance(self.in_entry.ts, int):
            return 0.0
        session_start = self.in_entry.ts
        session_end = self.end_ts(now)

        overlap_start = session_start if start is None else max(session_start, start)
        overlap_end = session_end if end is None else min(session_end, end)
        if overlap_end <= overlap_start:
            return 0.0
        return (overlap_end - overlap_start) / MS_PER_MINUTE
