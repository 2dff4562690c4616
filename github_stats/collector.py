"""Collection cycles: run the branch walker for every configured repository."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

import requests

from .api_client import GitHubApiClient
from .branch_commits import BranchCommitFetcher
from .branch_walker import BranchPageWalker
from .config import Config
from .exceptions import CollectionError
from .logs import CycleLoggerAdapter, LoggerLike
from .models import CycleReport, RepositoryStats, RepositoryTarget

logger = logging.getLogger(__name__)


@dataclass
class Collector:
    """Facade tying the API client, commit fetcher and branch walker together.

    Each repository is collected independently: its result is reported on its
    own and its failure never stops the others.
    """

    config: Config
    session: Optional[requests.Session] = None
    clock: Optional[Callable[[], datetime]] = None
    _clients: Dict[str, GitHubApiClient] = field(default_factory=dict, init=False, repr=False)
    _cycles: "itertools.count[int]" = field(default_factory=lambda: itertools.count(1), init=False, repr=False)

    def _client_for(self, token: str) -> GitHubApiClient:
        """One client per access token, reused within a cycle."""
        client = self._clients.get(token)
        if client is None:
            client = GitHubApiClient(
                token,
                session=self.session,
                timeout=self.config.api.request_timeout,
                strict_decode=self.config.collection.strict_decode,
            )
            self._clients[token] = client
        return client

    def collect_repository(
        self, target: RepositoryTarget, log: Optional[LoggerLike] = None
    ) -> RepositoryStats:
        """Run one collection for a repository over its active interval.

        Args:
            target: Repository to collect
            log: Logger scoped to the current cycle

        Returns:
            The repository's record

        Raises:
            CollectionError: If any request of the walk fails
        """
        log = log if log is not None else logger
        client = self._client_for(target.token)
        fetcher = BranchCommitFetcher(client, clock=self.clock, logger=log)
        walker = BranchPageWalker(
            client,
            fetcher,
            api_url=self.config.server.api_url,
            max_workers=self.config.collection.max_workers,
            logger=log,
        )
        results = walker.walk(target.url, target.interval)
        return RepositoryStats(org=target.org, name=target.name, results=results)

    def collect_cycle(self, targets: Optional[Iterable[RepositoryTarget]] = None) -> CycleReport:
        """Collect every repository once.

        Args:
            targets: Repositories to collect; defaults to the configured ones

        Returns:
            Successful records plus failures keyed by ``org/name``
        """
        report = CycleReport(cycle=next(self._cycles))
        cycle_log = CycleLoggerAdapter(logger, report.cycle)
        if targets is None:
            targets = self.config.repository_targets()

        try:
            for target in targets:
                repo_log = cycle_log.for_repo(target.full_name)
                try:
                    report.stats.append(self.collect_repository(target, repo_log))
                except CollectionError as exc:
                    repo_log.error(f"collection failed, skipping: {exc}")
                    report.failures[target.full_name] = exc
        finally:
            self.close()

        cycle_log.info(
            f"cycle done: {len(report.stats)} collected, {len(report.failures)} failed"
        )
        return report

    def close(self) -> None:
        """Close every API client opened during the cycle."""
        for client in self._clients.values():
            client.close()
        self._clients.clear()
