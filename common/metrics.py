"""
Metrics and observability utilities.
"""
import time
from typing import Dict, Any
from datetime import datetime


class RequestMetrics:
    """Track stage timings and model usage for one API request."""

    def __init__(self):
        self.start_time = time.time()
        self.end_time = None
        self.stages: Dict[str, float] = {}
        self.llm_calls = 0
        self.total_tokens = 0
        self.cache_hit = False

    def mark_stage(self, stage_name: str):
        """Mark completion of a stage."""
        self.stages[stage_name] = time.time()

    def finish(self):
        """Mark request as finished."""
        self.end_time = time.time()

    def add_llm_call(self, tokens: int):
        """Record an LLM call."""
        self.llm_calls += 1
        self.total_tokens += tokens

    def duration(self) -> float:
        """Get total duration in seconds."""
        if self.end_time:
            return self.end_time - self.start_time
        return time.time() - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dict."""
        return {
            "duration_seconds": round(self.duration(), 3),
            "llm_calls": self.llm_calls,
            "total_tokens": self.total_tokens,
            "cache_hit": self.cache_hit,
            "stages": {k: round(v - self.start_time, 3) for k, v in self.stages.items()},
            "start_time": datetime.fromtimestamp(self.start_time).isoformat(),
            "end_time": datetime.fromtimestamp(self.end_time).isoformat() if self.end_time else None
        }
