#!/usr/bin/env python3
"""
GitLab Contributors Count
Counts contributors and the file types they touched over a rolling window
"""

import argparse
import sys
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
from loguru import logger
from pydantic import ValidationError

from gitlab_contributors.analysis.identity import AuthorFilter, load_exclusion_file
from gitlab_contributors.collectors.contributors import ContributorAggregator
from gitlab_contributors.config.settings import settings, validate_settings
from gitlab_contributors.models.schemas import TargetSpec
from gitlab_contributors.storage.mongodb_client import mongodb_client
from gitlab_contributors.storage.report_writer import (
    contributors_json, summary_table, write_breakdown_csv
)


def parse_since(value: str) -> str:
    """Accept an ISO date or datetime and return it as the API's ``since`` value"""
    try:
        if len(value) == 10:
            return date.fromisoformat(value).isoformat()
        return datetime.fromisoformat(value.replace('Z', '+00:00')).isoformat()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid ISO date: {value!r}")


def default_since(days: int) -> str:
    start = datetime.now(timezone.utc) - timedelta(days=days)
    return start.strftime('%Y-%m-%dT%H:%M:%SZ')


def split_groups(values: Optional[List[str]]) -> Optional[List[str]]:
    if not values:
        return None
    groups = [g.strip() for value in values for g in value.split(',') if g.strip()]
    return groups or None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='gitlab-contributors',
        description='Count GitLab contributors and the file types they touched.'
    )
    p.add_argument('--token', default=None, help='GitLab access token (defaults to GITLAB_TOKEN).')
    p.add_argument('--url', default=None, help='GitLab instance URL (defaults to GITLAB_URL).')
    target = p.add_mutually_exclusive_group()
    target.add_argument('--project', default=None, help='Single project path, e.g. org/repo.')
    target.add_argument('--groups', action='append', default=None,
                        help='Group name or search term; repeat or comma separate.')
    p.add_argument('--since', type=parse_since, default=None,
                   help='Count commits on or after this ISO date (default: WINDOW_DAYS ago).')
    p.add_argument('--exclusion-file', default=None,
                   help='File with author emails to exclude, one per line.')
    p.add_argument('--output', default=None, help='Path of the extension breakdown CSV.')
    p.add_argument('--json', action='store_true', help='Print contributors as JSON.')
    p.add_argument('--log-level', default=None, help='Log level (defaults to LOG_LEVEL).')
    return p


def setup_logging(level: Optional[str] = None):
    """Configure logging"""
    level = (level or settings.log_level).upper()
    logger.remove()  # Remove default handler

    # Console logging
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
        level=level
    )

    # File logging
    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation="10 MB",
            retention="7 days",
            level=level
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    token = args.token if args.token is not None else settings.gitlab_token
    try:
        validate_settings(token)
        target = TargetSpec(
            url=args.url or settings.gitlab_url,
            token=token,
            project=args.project,
            groups=split_groups(args.groups)
        )
    except (ValueError, ValidationError) as e:
        logger.error(f"Configuration error: {e}")
        logger.error("Please copy .env.example to .env and configure your settings")
        return 1

    author_filter = AuthorFilter(settings.excluded_email_suffixes, settings.excluded_emails)
    if args.exclusion_file:
        try:
            author_filter = author_filter.with_emails(load_exclusion_file(args.exclusion_file))
        except OSError as e:
            logger.error(f"Cannot read exclusion file {args.exclusion_file}: {e}")
            return 1

    since = args.since or default_since(settings.window_days)
    aggregator = ContributorAggregator(target, author_filter=author_filter)
    result = aggregator.collect(since)

    write_breakdown_csv(result, args.output or settings.breakdown_csv)
    if args.json:
        print(contributors_json(result))
    else:
        print(summary_table(result))

    if mongodb_client.enabled:
        try:
            mongodb_client.connect()
            mongodb_client.save_report(result, target, since)
        except Exception as e:
            logger.error(f"Failed to save report to MongoDB: {e}")
        finally:
            mongodb_client.close()

    if result.projects_failed:
        logger.warning(
            f"{result.projects_failed} project(s) could not be scanned; the report is incomplete. "
            "Try running with `--log-level DEBUG`"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
