"""Domain models shared across the commit statistics collector."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .constants import METRIC_NAME
from .exceptions import CollectionError


@dataclass(slots=True)
class CommitResults:
    """Commit activity totals for a branch or a whole repository."""

    commits: int = 0
    committers: int = 0
    branches_count: int = 0
    stale_branches_count: int = 0
    timestamp: int = 0

    def fold(self, branch: "CommitResults") -> None:
        """Add one branch's result to this running total.

        Committers are summed, not deduplicated: an author active on two
        branches counts twice.
        """

        self.commits += branch.commits
        self.committers += branch.committers
        self.branches_count += 1
        self.stale_branches_count += branch.stale_branches_count


@dataclass(slots=True)
class Branch:
    """Branch entry from the branch listing."""

    name: str
    sha: str = ""
    url: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Branch":
        """Build a branch from a ``GET /branches`` item.

        Raises:
            ValueError: If the item has no usable name
        """
        name = payload.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"branch entry without a name: {payload!r}")
        commit = payload.get("commit") or {}
        if not isinstance(commit, dict):
            raise ValueError(f"branch {name!r} has a malformed commit reference: {commit!r}")
        return cls(name=name, sha=commit.get("sha") or "", url=commit.get("url") or "")


@dataclass(slots=True)
class Commit:
    """Fragment of a ``GET /commits`` item."""

    sha: str
    author_name: str
    author_date: datetime

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Commit":
        """Build a commit from a ``GET /commits`` item.

        Raises:
            ValueError: If the entry is not shaped like a commit or its author
                date is missing or malformed
        """
        sha = payload.get("sha") or ""
        if not isinstance(sha, str):
            raise ValueError(f"commit entry with a malformed sha: {sha!r}")
        detail = payload.get("commit") or {}
        if not isinstance(detail, dict):
            raise ValueError(f"commit {sha!r} has a malformed body: {detail!r}")
        author = detail.get("author") or {}
        if not isinstance(author, dict):
            raise ValueError(f"commit {sha!r} has a malformed author: {author!r}")
        name = author.get("name") or ""
        if not isinstance(name, str):
            raise ValueError(f"commit {sha!r} has a malformed author name: {name!r}")
        date = author.get("date")
        if not isinstance(date, str) or not date:
            raise ValueError(f"commit {sha!r} has no author date")
        return cls(
            sha=sha,
            author_name=name,
            author_date=parse_timestamp(date),
        )


@dataclass(frozen=True, slots=True)
class PaginationCursor:
    """Branch listing position derived from the first page's Link header."""

    collection_id: str
    next_page: int
    last_page: int

    @property
    def exhausted(self) -> bool:
        """True once there is no further page to request."""
        return self.next_page == 0 or self.next_page > self.last_page

    def advance(self) -> "PaginationCursor":
        return replace(self, next_page=self.next_page + 1)


@dataclass(slots=True)
class RepositoryTarget:
    """One configured repository to collect."""

    org: str
    name: str
    url: str
    token: str
    interval: timedelta

    @property
    def full_name(self) -> str:
        return f"{self.org}/{self.name}"


@dataclass(slots=True)
class RepositoryStats:
    """Per-repository record handed to the metrics sink."""

    org: str
    name: str
    results: CommitResults

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record into a JSON friendly payload."""

        return {
            "measurement": METRIC_NAME,
            "org": self.org,
            "name": self.name,
            "commits": self.results.commits,
            "contributors": self.results.committers,
            "branch_cnt": self.results.branches_count,
            "branch_stale_cnt": self.results.stale_branches_count,
            "timestamp": self.results.timestamp,
        }


@dataclass(slots=True)
class CycleReport:
    """Outcome of one collection cycle across all configured repositories."""

    cycle: int
    stats: List[RepositoryStats] = field(default_factory=list)
    failures: Dict[str, CollectionError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def get(self, full_name: str) -> Optional[RepositoryStats]:
        for item in self.stats:
            if f"{item.org}/{item.name}" == full_name:
                return item
        return None


def parse_timestamp(value: str) -> datetime:
    """Parse GitHub API timestamp string.

    Args:
        value: ISO format timestamp string

    Returns:
        Parsed datetime object
    """
    if value.endswith("Z"):
        value = value.replace("Z", "+00:00")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
