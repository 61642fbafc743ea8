"""Report rendering and distribution module."""
from .distributor import ReportDistributor

__all__ = ["ReportDistributor"]
