"""
Timing Utilities for Latency Instrumentation

Logs execution times of the pipeline stages (discovery, retrieval) so a
single request can be traced through the logs.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

logger = logging.getLogger("threadpulse.timing")


def log_timing(stage: str, action: str, duration_ms: Optional[float] = None):
    """Log a timing event in standard format."""
    if duration_ms is not None:
        logger.info("[TIMING] %s: %s duration=%.0fms", stage, action, duration_ms)
    else:
        logger.info("[TIMING] %s: %s", stage, action)


class StepTimer:
    """
    Utility class for timing multiple steps within one pipeline run.

    Usage:
        timer = StepTimer("pipeline")
        async with timer.async_step("discovery"):
            links = await search_reddit_links(query)
        timer.summary()
    """

    def __init__(self, stage: str):
        self.stage = stage
        self.steps: dict[str, float] = {}
        self.start_time = time.perf_counter()

    @asynccontextmanager
    async def async_step(self, step_name: str):
        """Time a single async step."""
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.steps[step_name] = duration_ms
            log_timing(self.stage, step_name, duration_ms)

    def summary(self) -> float:
        """Log summary of all steps."""
        total_ms = (time.perf_counter() - self.start_time) * 1000
        log_timing(self.stage, "TOTAL", total_ms)
        return total_ms
