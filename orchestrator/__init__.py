"""Run orchestration and status tracking."""

from .service import RunOrchestrator, build_search_query, run_pipeline
from .store import RunStatusTracker

__all__ = [
    "RunOrchestrator",
    "RunStatusTracker",
    "build_search_query",
    "run_pipeline",
]
