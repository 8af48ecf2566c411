"""
Lightweight profiling utility for measuring time spent in different operations.
Used to record how long vision, scoring and Gemini calls take per analysis.
"""
import time
import logging
from contextvars import ContextVar
from typing import Dict, Optional
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class Profiler:
    """Lightweight profiler for tracking operation timings"""

    def __init__(self):
        self.timings: Dict[str, float] = {}
        self.start_times: Dict[str, float] = {}

    def start(self, operation: str) -> None:
        """Start timing an operation"""
        self.start_times[operation] = time.perf_counter()

    def end(self, operation: str) -> float:
        """End timing an operation and return elapsed time in seconds"""
        if operation not in self.start_times:
            logger.warning(f"Operation '{operation}' was not started")
            return 0.0

        elapsed = time.perf_counter() - self.start_times[operation]
        # Repeated operations (e.g. one request per fallback model) accumulate
        self.timings[operation] = self.timings.get(operation, 0.0) + elapsed
        del self.start_times[operation]
        return elapsed

    @contextmanager
    def measure(self, operation: str):
        """Context manager for measuring operation time"""
        self.start(operation)
        try:
            yield
        finally:
            self.end(operation)

    def get_timings(self) -> Dict[str, float]:
        """Get all recorded timings"""
        return self.timings.copy()

    def get_timings_ms(self) -> Dict[str, float]:
        """Recorded timings rounded to milliseconds, ready for JSON storage"""
        return {op: round(elapsed * 1000, 2) for op, elapsed in self.timings.items()}

    def get_total(self) -> float:
        """Get total time across all measured operations"""
        return sum(self.timings.values())

    def log_summary(self, prefix: str = "") -> None:
        """Log a summary of all timings"""
        if not self.timings:
            return

        total = self.get_total()
        lines = [f"{prefix}Profiling Summary:"]

        # Sort by time (descending)
        sorted_timings = sorted(self.timings.items(), key=lambda x: x[1], reverse=True)

        for operation, elapsed in sorted_timings:
            percentage = (elapsed / total * 100) if total > 0 else 0
            lines.append(f"{prefix}  {operation}: {elapsed*1000:.2f}ms ({percentage:.1f}%)")

        lines.append(f"{prefix}  Total: {total*1000:.2f}ms")
        logger.info("\n".join(lines))


# Per-request profiler (each request runs in its own context)
_profiler: ContextVar[Optional[Profiler]] = ContextVar("profiler", default=None)


def get_profiler() -> Profiler:
    """Get or create the current profiler instance"""
    profiler = _profiler.get()
    if profiler is None:
        profiler = Profiler()
        _profiler.set(profiler)
    return profiler


def reset_profiler() -> Profiler:
    """Reset the current profiler and return the new instance"""
    profiler = Profiler()
    _profiler.set(profiler)
    return profiler
