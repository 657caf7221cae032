"""Orchestrator - pipeline coordination and store wiring."""

from .runner import DeadlineRunner, RunStats, open_store, run_pipeline

__all__ = [
    "DeadlineRunner",
    "RunStats",
    "open_store",
    "run_pipeline",
]
