import csv
import json
from pathlib import Path
from typing import List
from tabulate import tabulate
from loguru import logger

from gitlab_contributors.models.schemas import AggregationResult


def breakdown_rows(result: AggregationResult) -> List[List[str]]:
    """Header plus one row per author email with a count per discovered extension"""
    rows = [['author', *result.extensions]]
    for author, touched in result.files_touched.items():
        rows.append([author, *(str(touched.get(ext, 0)) for ext in result.extensions)])
    return rows


def write_breakdown_csv(result: AggregationResult, path: str) -> bool:
    """Write the per-author extension breakdown; returns False if the file could not be written"""
    try:
        output = Path(path)
        if output.parent and not output.parent.exists():
            output.parent.mkdir(parents=True)
        with output.open('w', newline='', encoding='utf-8') as f:
            csv.writer(f).writerows(breakdown_rows(result))
    except OSError as e:
        logger.debug(f"Failed to write contributor breakdown CSV.\n{e}")
        logger.error(f"Failed to write {path}. Try running with `--log-level DEBUG`")
        return False

    logger.info(f"Wrote contributor breakdown for {len(result.files_touched)} author(s) to {path}")
    return True


def contributors_json(result: AggregationResult) -> str:
    return json.dumps(
        {name: c.model_dump(by_alias=True) for name, c in result.contributors.items()},
        indent=2
    )


def summary_table(result: AggregationResult) -> str:
    rows = [
        [name, c.email, c.contributions_count, ', '.join(c.repos_contributed_to)]
        for name, c in result.contributors.items()
    ]
    table = tabulate(rows, headers=['Contributor', 'Email', 'Commits', 'Repos'], tablefmt='grid')
    return f"{table}\nTotal unique contributors: {len(result.contributors)}"
