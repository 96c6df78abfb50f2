import csv
import json

from gitlab_contributors.models.schemas import AggregationResult, Contributor
from gitlab_contributors.storage.report_writer import (
    breakdown_rows, contributors_json, summary_table, write_breakdown_csv
)


def _result():
    return AggregationResult(
        contributors={
            'Alice': Contributor(email='alice@example.com', contributions_count=3,
                                 repos_contributed_to=['org/api(private)', 'org/web(public)']),
            'Bob': Contributor(email='bob@example.com', contributions_count=1,
                               repos_contributed_to=['org/api(private)']),
        },
        files_touched={
            'alice@example.com': {'py': 4, 'md': 1},
            'bob@example.com': {'Makefile': 1},
        },
        extensions=['py', 'md', 'Makefile']
    )


def test_breakdown_rows_fill_zeros():
    assert breakdown_rows(_result()) == [
        ['author', 'py', 'md', 'Makefile'],
        ['alice@example.com', '4', '1', '0'],
        ['bob@example.com', '0', '0', '1'],
    ]


def test_empty_result_has_header_only():
    assert breakdown_rows(AggregationResult()) == [['author']]


def test_write_breakdown_csv(tmp_path):
    path = tmp_path / 'reports' / 'breakdown.csv'

    assert write_breakdown_csv(_result(), str(path))

    with path.open(newline='') as f:
        rows = list(csv.reader(f))
    assert rows[0] == ['author', 'py', 'md', 'Makefile']
    assert rows[2] == ['bob@example.com', '0', '0', '1']


def test_write_breakdown_csv_failure_is_reported(tmp_path):
    assert not write_breakdown_csv(_result(), str(tmp_path))


def test_contributors_json_uses_camel_case():
    data = json.loads(contributors_json(_result()))

    assert data['Bob'] == {
        'email': 'bob@example.com',
        'contributionsCount': 1,
        'reposContributedTo': ['org/api(private)'],
    }


def test_summary_table_lists_contributors_and_total():
    table = summary_table(_result())

    assert 'alice@example.com' in table
    assert 'org/api(private), org/web(public)' in table
    assert table.endswith('Total unique contributors: 2')
