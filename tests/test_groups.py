from gitlab_contributors.collectors.groups import GroupExpander

from conftest import FakeFetcher


def test_expand_keeps_complete_groups_only(groups_target):
    fetcher = FakeFetcher({'/groups': [
        {'id': 1, 'name': 'Platform', 'full_path': 'acme/platform'},
        {'id': 2, 'name': 'Platform Tools', 'full_path': 'acme/platform/tools'},
        {'id': 3, 'name': '', 'full_path': 'acme/unnamed'},
        {'name': 'No id', 'full_path': 'acme/no-id'},
        {'id': 4, 'name': 'No path'},
    ]})

    groups = GroupExpander(groups_target, fetcher).collect('platform')

    assert [g.full_path for g in groups] == ['acme/platform', 'acme/platform/tools']
    assert groups[1].encoded_path == 'acme%2Fplatform%2Ftools'


def test_expand_searches_all_available_groups(groups_target):
    fetcher = FakeFetcher({'/groups': []})

    GroupExpander(groups_target, fetcher).collect('plat')

    assert fetcher.calls == [('/groups', {'all_available': 'true', 'search': 'plat'})]


def test_expand_failure_returns_empty(groups_target):
    fetcher = FakeFetcher(failures={'/groups'})

    assert GroupExpander(groups_target, fetcher).collect('platform') == []
