import logging
from pathlib import Path
from typing import List, Optional, Tuple

import requests
from pydantic import BaseModel, ValidationError

from .config import Settings
from .errors import PageSourceError

logger = logging.getLogger(__name__)


class _RevisionEntry(BaseModel):
    id: int


class HistoryResponse(BaseModel):
    """Page history API response; newest revision first."""

    revisions: List[_RevisionEntry]


class PageSource:
    """Fetches page revisions and keeps them in a local cache directory."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.cache_dir = Path(self.settings.cache_dir)
        self.timeout = self.settings.timeout
        self.session = requests.Session()
        self.session.headers["User-Agent"] = self.settings.user_agent

    def revision_path(self, revision: int) -> Path:
        """Cache path of a revision. Existence is not checked."""
        return self.cache_dir / f"{revision}.html"

    def latest_revision(self) -> int:
        """Ask the history API for the newest revision id."""
        try:
            response = self.session.get(self.settings.history_api_url, timeout=self.timeout)
            response.raise_for_status()
            history = HistoryResponse.model_validate(response.json())
        except (requests.RequestException, ValueError, ValidationError) as e:
            raise PageSourceError(f"Failed to query the latest revision: {e}") from e
        if not history.revisions:
            raise PageSourceError("Revision history is empty")
        return history.revisions[0].id

    def cached_revisions(self) -> List[int]:
        if not self.cache_dir.is_dir():
            return []
        revisions = []
        for path in self.cache_dir.glob("*.html"):
            # ignore files with bad names
            if path.stem.isdecimal():
                revisions.append(int(path.stem))
        return sorted(revisions)

    def latest_cached_revision(self) -> int:
        revisions = self.cached_revisions()
        if not revisions:
            raise PageSourceError(f"No cached pages found in {self.cache_dir}")
        return revisions[-1]

    def fetch_online(self, revision: Optional[int] = None) -> Tuple[Path, str]:
        """Get a revision from the network, newest if unspecified; cache it."""
        if revision is None:
            revision = self.latest_revision()

        page_path = self.revision_path(revision)
        if page_path.exists():
            logger.info(f"Using cached revision {revision}")
            return page_path, page_path.read_text(encoding="utf-8")

        logger.info(f"Fetching revision {revision}")
        try:
            response = self.session.get(
                self.settings.page_url, params={"oldid": revision}, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise PageSourceError(f"Failed to fetch revision {revision}: {e}") from e

        content = response.text
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        page_path.write_text(content, encoding="utf-8")
        return page_path, content

    def fetch_offline(self, revision: Optional[int] = None) -> Tuple[Path, str]:
        """Read a revision from the cache, newest if unspecified."""
        if revision is None:
            revision = self.latest_cached_revision()
        page_path = self.revision_path(revision)
        try:
            content = page_path.read_text(encoding="utf-8")
        except OSError as e:
            raise PageSourceError(f"Revision {revision} is not cached: {e}") from e
        logger.info(f"Using cached revision {revision}")
        return page_path, content

    def get_page(self, revision: Optional[int] = None, pull: bool = False) -> Tuple[Path, str]:
        """Get the page the way a user would expect.

        - with ``pull``, go online; if the newest revision cannot be fetched,
          fall back to the newest cached one
        - without it, use the cache; go online only when nothing is cached
        """
        if pull:
            try:
                return self.fetch_online(revision)
            except PageSourceError as e:
                if revision is not None:
                    raise
                logger.warning(f"{e}; will attempt to use the newest cached page")
                return self.fetch_offline()

        try:
            return self.fetch_offline(revision)
        except PageSourceError as e:
            logger.warning(f"{e}; fetching from the network")
            return self.fetch_online(revision)
