"""Branch listing traversal and repository-level aggregation."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import timedelta
from typing import Any, Dict, List, Optional

from .api_client import GitHubApiClient
from .branch_commits import BranchCommitFetcher
from .constants import API_PAGINATION, DEFAULT_API_URL
from .exceptions import CollectionError, DecodeError
from .link_parser import parse_link_header
from .logs import LoggerLike
from .models import Branch, CommitResults, PaginationCursor


def build_page_params(page: Optional[int] = None) -> Dict[str, Any]:
    """Query parameters for one branch listing page.

    Examples:
        >>> build_page_params()
        {'per_page': 100}

        >>> build_page_params(3)
        {'per_page': 100, 'page': 3}
    """
    params: Dict[str, Any] = {"per_page": API_PAGINATION["per_page"]}
    if page is not None and page != API_PAGINATION["first_page"]:
        params["page"] = page
    return params


class BranchPageWalker:
    """Walk every page of a repository's branches and fold branch results.

    The ``Link`` header of the first page alone determines how many pages
    follow; later pages are addressed through the numeric collection id
    (``/repositories/{id}/branches``) rather than the owner/name path.
    """

    def __init__(
        self,
        api_client: GitHubApiClient,
        fetcher: BranchCommitFetcher,
        api_url: str = DEFAULT_API_URL,
        max_workers: int = 1,
        logger: Optional[LoggerLike] = None,
    ):
        """Initialize the walker.

        Args:
            api_client: Client carrying the repository's access token
            fetcher: Per-branch commit fetcher
            api_url: API server root used to build follow-up page URLs
            max_workers: Concurrent branch fetches per page; 1 is sequential
            logger: Logger scoped to the current collection cycle
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.api_client = api_client
        self.fetcher = fetcher
        self.api_url = api_url.rstrip("/")
        self.max_workers = max_workers
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def walk(self, repo_url: str, interval: timedelta) -> CommitResults:
        """Aggregate commit activity over all branches of a repository.

        Args:
            repo_url: Repository API base, e.g. https://api.github.com/repos/o/r
            interval: Active interval, must be positive

        Returns:
            Repository totals, timestamped at completion

        Raises:
            ValueError: If interval is not positive
            CollectionError: If any page or branch fetch fails. ``partial``
                holds what had been folded so far; it is not a result.
        """
        if interval <= timedelta(0):
            raise ValueError(f"interval must be positive, got {interval}")

        total = CommitResults()
        try:
            pages = self._walk_pages(repo_url.rstrip("/"), interval, total)
        except CollectionError as exc:
            exc.partial = total
            self.logger.warning(
                f"Walk of {repo_url} aborted after {total.branches_count} branches: {exc}"
            )
            raise

        total.timestamp = time.time_ns()
        self.logger.info(
            f"{repo_url}: {pages} page(s), {total.branches_count} branches, "
            f"{total.commits} commits, {total.committers} committers, "
            f"{total.stale_branches_count} stale"
        )
        return total

    def _walk_pages(self, repo_url: str, interval: timedelta, total: CommitResults) -> int:
        url = f"{repo_url}/branches"
        page = API_PAGINATION["first_page"]
        cursor: Optional[PaginationCursor] = None
        pages = 0

        while True:
            response = self.api_client.get(url, params=build_page_params(page), source="branches")
            if pages == 0:
                cursor = parse_link_header(response.headers.get("Link"))
                if cursor is None:
                    self.logger.debug(f"{repo_url}: single page of branches")
            pages += 1

            branches = self._decode_branches(response)
            self.logger.debug(f"{repo_url}: page {page} has {len(branches)} branches")
            self._fold_page(repo_url, branches, interval, total)

            if cursor is None or cursor.exhausted:
                return pages

            page = cursor.next_page
            url = f"{self.api_url}/repositories/{cursor.collection_id}/branches"
            cursor = cursor.advance()

    def _decode_branches(self, response: Any) -> List[Branch]:
        branches: List[Branch] = []
        for item in self.api_client.decode_list(response, source="branches"):
            try:
                branches.append(Branch.from_api(item))
            except ValueError as exc:
                if self.api_client.strict_decode:
                    raise DecodeError(str(exc), source="branches") from exc
                self.logger.warning(f"Skipping branch entry: {exc}")
        return branches

    def _fold_page(
        self,
        repo_url: str,
        branches: List[Branch],
        interval: timedelta,
        total: CommitResults,
    ) -> None:
        """Fetch and fold every branch of one page."""
        # For a single worker or branch, no need for parallelization overhead
        if self.max_workers == 1 or len(branches) <= 1:
            for branch in branches:
                total.fold(self.fetcher.fetch(repo_url, branch.name, interval))
            return

        max_workers = min(self.max_workers, len(branches))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self.fetcher.fetch, repo_url, branch.name, interval): branch
                for branch in branches
            }
            for future in as_completed(futures):
                try:
                    result = future.result()
                except CollectionError:
                    self.logger.debug(f"branch {futures[future].name} failed, cancelling page")
                    for pending in futures:
                        pending.cancel()
                    raise
                total.fold(result)
