"""Per-branch commit activity and staleness."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from .api_client import GitHubApiClient
from .constants import SINCE_FORMAT, STALENESS_WINDOW
from .exceptions import DecodeError
from .logs import LoggerLike
from .models import Commit, CommitResults


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def summarize_commits(
    commits: Iterable[Commit], active_since: datetime, stale_since: datetime
) -> CommitResults:
    """Count active commits and authors, and decide staleness.

    Commits are taken in the order received. Both window boundaries are
    exclusive: a commit dated exactly at ``active_since`` is not active, one
    dated exactly at ``stale_since`` does not keep the branch fresh.

    Args:
        commits: Commits of one branch
        active_since: Start of the active interval
        stale_since: Start of the staleness window

    Returns:
        Branch-level result; ``branches_count`` is left at zero
    """
    result = CommitResults()
    authors: Set[str] = set()
    stale = True

    for commit in commits:
        if commit.author_date > active_since:
            result.commits += 1
            authors.add(commit.author_name)

        if stale and commit.author_date > stale_since:
            stale = False

    result.committers = len(authors)
    result.stale_branches_count = 1 if stale else 0
    return result


class BranchCommitFetcher:
    """Fetch one branch's commit history and reduce it to ``CommitResults``.

    A single request with ``since`` set to the staleness cutoff serves both
    the staleness check and the (shorter) active interval.
    """

    def __init__(
        self,
        api_client: GitHubApiClient,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[LoggerLike] = None,
    ):
        """Initialize the fetcher.

        Args:
            api_client: Client carrying the repository's access token
            clock: Returns the current aware UTC time; injectable for tests
            logger: Logger scoped to the current collection cycle
        """
        self.api_client = api_client
        self.clock = clock or utc_now
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def fetch(self, repo_url: str, branch: str, interval: timedelta) -> CommitResults:
        """Compute the commit activity of ``branch``.

        Args:
            repo_url: Repository API base, e.g. https://api.github.com/repos/o/r
            branch: Branch name
            interval: Active interval, must be positive

        Returns:
            Branch-level ``CommitResults``

        Raises:
            ValueError: If interval is not positive or branch is empty
            ApiError: If the commit listing cannot be fetched
        """
        if interval <= timedelta(0):
            raise ValueError(f"interval must be positive, got {interval}")
        if not branch:
            raise ValueError("branch name cannot be empty")

        now = self.clock()
        active_since = now - interval
        stale_since = now - STALENESS_WINDOW

        response = self.api_client.get(
            f"{repo_url.rstrip('/')}/commits",
            params={"sha": branch, "since": stale_since.strftime(SINCE_FORMAT)},
            source="commits",
        )
        commits = self._decode_commits(
            self.api_client.decode_list(response, source="commits"), branch
        )

        result = summarize_commits(commits, active_since, stale_since)
        result.timestamp = time.time_ns()
        self.logger.debug(
            f"branch {branch}: {result.commits} commits, "
            f"{result.committers} committers, stale={bool(result.stale_branches_count)}"
        )
        return result

    def _decode_commits(self, items: List[Dict[str, Any]], branch: str) -> List[Commit]:
        commits: List[Commit] = []
        for item in items:
            try:
                commits.append(Commit.from_api(item))
            except ValueError as exc:
                if self.api_client.strict_decode:
                    raise DecodeError(str(exc), source="commits") from exc
                self.logger.warning(f"Skipping commit on branch {branch}: {exc}")
        return commits
