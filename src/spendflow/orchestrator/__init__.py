"""Processing orchestration module."""
from .processor import ReportOrchestrator, RunResult, RunOutcome

__all__ = ["ReportOrchestrator", "RunResult", "RunOutcome"]
