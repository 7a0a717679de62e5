"""A stopwatch that reports CPU time for short runs and wall time for long ones."""

from __future__ import annotations

import sys
import time
from typing import Callable, Optional, TextIO


class Timer:
    """Accumulating timer; it must be started with ``start`` or ``restart``."""

    def __init__(
        self,
        out: Optional[TextIO] = None,
        clock: Callable[[], float] = time.process_time,
        wall: Callable[[], float] = time.time,
    ) -> None:
        self.running = False
        self.acc_time = 0.0
        self._start_clock = 0.0
        self._start_time = 0
        self._out = out
        self._clock = clock
        self._wall = wall

    def _write(self, text: str) -> None:
        (self._out if self._out is not None else sys.stdout).write(text)

    def _mark(self) -> None:
        self._start_clock = self._clock()
        self._start_time = int(self._wall())

    def elapsed_time(self) -> float:
        """Time since the last start: CPU seconds under an hour, else wall seconds."""
        acc_sec = int(self._wall()) - self._start_time
        if acc_sec < 3600:
            return self._clock() - self._start_clock
        return float(acc_sec)

    @property
    def total(self) -> float:
        """Accumulated time including the current running span."""
        return self.acc_time + (self.elapsed_time() if self.running else 0.0)

    def start(self, msg: Optional[str] = None) -> None:
        """Start the timer; a running timer keeps running."""
        if msg:
            self._write(f"{msg}\n")
        if self.running:
            return
        self.running = True
        self._mark()

    def restart(self, msg: Optional[str] = None) -> None:
        """Reset the accumulated time and start again."""
        if msg:
            self._write(f"{msg}\n")
        self.running = True
        self.acc_time = 0.0
        self._mark()

    def stop(self, msg: Optional[str] = None) -> None:
        """Stop the timer, keeping the time accumulated so far."""
        if msg:
            self._write(f"{msg}\n")
        if self.running:
            self.acc_time += self.elapsed_time()
        self.running = False

    def check(self, msg: Optional[str] = None, count: Optional[int] = None) -> None:
        """Print the current total time, optionally labelled and numbered."""
        timing = f"Time [{self.total:.4f}] seconds\n"
        if count is None:
            prefix = f"{msg} : " if msg else ""
            self._write(prefix + timing)
        else:
            prefix = f"{msg}:" if msg else ""
            self._write(f"{prefix}{count}: {timing}")

    def __enter__(self) -> Timer:
        self.restart()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __str__(self) -> str:
        return f"{self.total:.4f}"