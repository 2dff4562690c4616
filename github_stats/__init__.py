"""Commit activity statistics for GitHub repositories."""

from .collector import Collector
from .config import Config
from .models import CommitResults, CycleReport, RepositoryStats, RepositoryTarget

__all__ = [
    "Collector",
    "CommitResults",
    "Config",
    "CycleReport",
    "RepositoryStats",
    "RepositoryTarget",
]

__version__ = "1.0.0"
