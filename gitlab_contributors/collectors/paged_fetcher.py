from typing import Any, Dict, List, Optional
import requests
from loguru import logger


class UpstreamFetchFailure(Exception):
    """A paginated call failed as a whole"""

    def __init__(self, url: str, context: str, reason: str, status: Optional[int] = None):
        self.url = url
        self.context = context
        self.reason = reason
        self.status = status
        status_text = f" (HTTP {status})" if status is not None else ""
        super().__init__(f"{context}: {reason}{status_text} [{url}]")


class PagedFetcher:
    """Fetches every page of a GitLab list endpoint"""

    def __init__(self, token: str, per_page: int = 100, timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.per_page = per_page
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'PRIVATE-TOKEN': token})

    def fetch_all_pages(self, url: str, context: str,
                        params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Return all items of ``url`` concatenated across pages.

        Pagination follows the ``Link: rel="next"`` header and falls back to
        ``X-Next-Page``. Single-object responses come back as a one-element
        list. Any failure discards the pages read so far.
        """
        query = dict(params or {})
        query.setdefault('per_page', self.per_page)

        items: List[Dict[str, Any]] = []
        next_url: Optional[str] = url
        next_params: Optional[Dict[str, Any]] = query
        pages = 0

        while next_url:
            response = self._get(next_url, next_params, context)
            data = self._decode(response, next_url, context)
            pages += 1

            if isinstance(data, dict):
                return [data]
            if not isinstance(data, list):
                raise UpstreamFetchFailure(next_url, context, f"unexpected payload type {type(data).__name__}")
            if not data:
                break
            items.extend(data)

            link = response.links.get('next', {}).get('url')
            if link:
                next_url, next_params = link, None
                continue

            next_page = response.headers.get('X-Next-Page')
            if next_page:
                next_url, next_params = url, {**query, 'page': next_page}
            else:
                next_url = None

        logger.debug(f"{context}: fetched {len(items)} items over {pages} page(s)")
        return items

    def _get(self, url: str, params: Optional[Dict[str, Any]], context: str) -> requests.Response:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamFetchFailure(url, context, str(e)) from e

        if not response.ok:
            raise UpstreamFetchFailure(url, context, response.reason or 'request failed', response.status_code)
        return response

    @staticmethod
    def _decode(response: requests.Response, url: str, context: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamFetchFailure(url, context, f"invalid JSON body: {e}", response.status_code) from e
