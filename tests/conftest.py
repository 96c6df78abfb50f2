import copy

import pytest

from gitlab_contributors.collectors.paged_fetcher import UpstreamFetchFailure
from gitlab_contributors.models.schemas import TargetSpec

HOST = 'https://gitlab.example.com'


class FakeFetcher:
    """In-memory paged fetcher keyed by API path (the part after /api/v4).

    Route values may be a list of records, a single record, or a callable
    taking the query params. Unknown or failing paths raise UpstreamFetchFailure.
    """

    def __init__(self, routes=None, failures=()):
        self.routes = dict(routes or {})
        self.failures = set(failures)
        self.calls = []

    def fetch_all_pages(self, url, context, params=None):
        path = url.split('/api/v4', 1)[1]
        self.calls.append((path, dict(params or {})))
        if path in self.failures or path not in self.routes:
            raise UpstreamFetchFailure(url, context, 'Not Found', 404)
        value = self.routes[path]
        if callable(value):
            value = value(params or {})
        if isinstance(value, dict):
            return [copy.deepcopy(value)]
        return copy.deepcopy(value)

    def paths(self):
        return [path for path, _ in self.calls]


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def project_target():
    return TargetSpec(url=HOST, token='secret', project='org/repo')


@pytest.fixture
def groups_target():
    return TargetSpec(url=HOST, token='secret', groups=['platform'])


@pytest.fixture
def all_target():
    return TargetSpec(url=HOST, token='secret')
