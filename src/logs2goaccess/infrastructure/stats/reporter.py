"""
Background statistics reporter.

The conversion loop hands over a counters snapshot after every line; a
daemon thread prints the most recent one at a fixed interval. The hand-over
slot holds a single snapshot, so the loop never waits on the reporter.
"""

import logging
import queue
import threading

from rich.console import Console

from logs2goaccess.core.models import ConversionStats

__all__ = ["StatsReporter", "format_stats"]

logger = logging.getLogger(__name__)


def format_stats(stats: ConversionStats) -> str:
    """Render counters as a one-line rich markup string."""
    return (
        f"[dim]read[/dim] {stats.lines_read:,} "
        f"[dim]included[/dim] [green]{stats.included:,}[/green] "
        f"[dim]skipped[/dim] [yellow]{stats.skipped:,}[/yellow] "
        f"[dim]failed[/dim] [red]{stats.failed:,}[/red] "
        f"[dim]({stats.lines_per_second:,.0f} lines/s)[/dim]"
    )


class StatsReporter(threading.Thread):
    """
    Periodically prints conversion progress to stderr.

    Usage:
        reporter = StatsReporter(interval=5.0)
        reporter.start()
        ...  # reporter.offer(stats.snapshot()) after each line
        reporter.stop()
    """

    def __init__(self, interval: float = 5.0, console: Console | None = None):
        super().__init__(name="stats-reporter", daemon=True)
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.console = console or Console(stderr=True)
        self._slot: queue.Queue[ConversionStats] = queue.Queue(maxsize=1)
        self._stop_event = threading.Event()
        self._latest: ConversionStats | None = None
        self._printed: ConversionStats | None = None

    def offer(self, stats: ConversionStats) -> None:
        """Store the newest snapshot, replacing an unread one. Never blocks."""
        while True:
            try:
                self._slot.put_nowait(stats)
                return
            except queue.Full:
                try:
                    self._slot.get_nowait()
                except queue.Empty:
                    pass

    def latest(self) -> ConversionStats | None:
        """Take the pending snapshot, if any, and remember it."""
        try:
            self._latest = self._slot.get_nowait()
        except queue.Empty:
            pass
        return self._latest

    def run(self) -> None:
        while not self._stop_event.wait(self.interval):
            stats = self.latest()
            if stats is not None and stats is not self._printed:
                self.console.print(format_stats(stats), highlight=False)
                self._printed = stats

    def stop(self, final: ConversionStats | None = None) -> None:
        """
        Stop the thread and print a final summary.

        Args:
            final: Final counters; the latest offered snapshot is used if None
        """
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout=self.interval + 1.0)
        stats = final or self.latest()
        if stats is None:
            logger.debug("no statistics were offered")
            return
        self.console.print(f"[bold]done[/bold] {format_stats(stats)}", highlight=False)
