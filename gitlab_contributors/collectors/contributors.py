from collections import ChainMap
from typing import Dict, List, MutableMapping, Optional, Set
from loguru import logger

from gitlab_contributors.analysis.extensions import ExtensionTable
from gitlab_contributors.analysis.identity import AuthorFilter, IdentityResolver, prior_entry
from gitlab_contributors.collectors.base_collector import BaseCollector
from gitlab_contributors.collectors.paged_fetcher import PagedFetcher, UpstreamFetchFailure
from gitlab_contributors.collectors.projects import ProjectResolver
from gitlab_contributors.config.settings import settings
from gitlab_contributors.models.schemas import (
    AggregationResult, Commit, Contributor, DiffEntry, Project, TargetSpec
)


class AggregationState:
    """Contributor map and extension table owned by one aggregation run"""

    def __init__(self):
        self.contributors: MutableMapping[str, Contributor] = {}
        self.extensions = ExtensionTable()
        self.warned_keys: Set[str] = set()

    def stage(self) -> 'AggregationState':
        """Empty overlay for one project's changes that reads through to this state"""
        staged = AggregationState()
        staged.contributors = ChainMap({}, self.contributors)
        staged.warned_keys = self.warned_keys
        return staged

    def commit(self, staged: 'AggregationState') -> None:
        """Apply the changes recorded in a staged overlay"""
        self.contributors.update(staged.contributors.maps[0])
        self.extensions.merge(staged.extensions)


class ContributorAggregator(BaseCollector):
    """Walks projects, commits and diffs and aggregates contributor activity"""

    def __init__(self, target: TargetSpec, fetcher: Optional[PagedFetcher] = None,
                 project_resolver: Optional[ProjectResolver] = None,
                 identity_resolver: Optional[IdentityResolver] = None,
                 author_filter: Optional[AuthorFilter] = None):
        super().__init__(target, fetcher)
        self.project_resolver = project_resolver or ProjectResolver(target, self.fetcher)
        self.identity_resolver = identity_resolver or IdentityResolver(settings.duplicate_marker)
        self.author_filter = author_filter or AuthorFilter(
            settings.excluded_email_suffixes,
            settings.excluded_emails
        )

    def collect(self, since: str) -> AggregationResult:
        """Aggregate contributors of every target project with commits on or after ``since``"""
        try:
            projects = self.project_resolver.collect()
        except Exception as e:
            self._report_failure("Failed to retrieve contributors from GitLab", e)
            projects = []

        projects = self._unique(projects)
        logger.info(f"Scanning {len(projects)} project(s) for commits since {since}")

        state = AggregationState()
        scanned = 0
        failed = 0
        for project in projects:
            # A failing project records nothing
            staged = state.stage()
            try:
                project = self._describe(project)
                self.scan_project(project, since, staged)
            except Exception as e:
                failed += 1
                self._report_failure(f"Failed to retrieve commits for {project.path_with_namespace} from GitLab", e)
                continue
            state.commit(staged)
            scanned += 1

        logger.info(
            f"Aggregation completed. Projects: {scanned} scanned, {failed} failed. "
            f"Contributors: {len(state.contributors)}"
        )
        return AggregationResult(
            contributors=dict(sorted(state.contributors.items())),
            files_touched=state.extensions.files_touched,
            extensions=state.extensions.extensions,
            projects_scanned=scanned,
            projects_failed=failed
        )

    def scan_project(self, project: Project, since: str, state: AggregationState) -> None:
        logger.debug(
            f"Fetching contributors of project {project.path_with_namespace} - ID {project.id}"
        )
        records = self._make_api_call(
            f"/projects/{project.encoded_path}/repository/commits",
            f"{project.path_with_namespace} commits",
            {'since': since}
        )
        for commit in self._parse_records(Commit, records):
            self.process_commit(project, commit, state)

    def process_commit(self, project: Project, commit: Commit, state: AggregationState) -> None:
        """Count one commit and the files it touched"""
        name, email = commit.author_name, commit.author_email
        if self.author_filter.is_excluded(email):
            logger.debug(f"Skipping excluded author {email} on {commit.id}")
            return

        label = project.label
        key = self.identity_resolver.resolve(name, email, state.contributors)
        prior = prior_entry(key, name, email, state.contributors)
        if prior is None:
            count, repos = 1, [label]
        else:
            _, previous = prior
            count = previous.contributions_count + 1
            repos = list(previous.repos_contributed_to)
            if label not in repos:
                repos.append(label)

        if prior is not None and prior[0] != key and key not in state.warned_keys:
            state.warned_keys.add(key)
            logger.warning(
                f"Commit {commit.id} by {name} <{email}> carries totals from '{prior[0]}' into '{key}'"
            )

        state.contributors[key] = Contributor(
            email=email,
            contributions_count=count,
            repos_contributed_to=repos
        )
        state.extensions.add_author(email)

        diffs = self._make_api_call(
            f"/projects/{project.encoded_path}/repository/commits/{commit.id}/diff",
            f"{project.path_with_namespace}/{commit.id} diff"
        )
        for diff in self._parse_records(DiffEntry, diffs):
            state.extensions.record(email, diff.old_path)

    def _describe(self, project: Project) -> Project:
        """Fill in id and visibility for projects given only by path"""
        if project.visibility is not None:
            return project
        try:
            records = self._make_api_call(f"/projects/{project.encoded_path}", 'Project')
        except UpstreamFetchFailure as e:
            logger.debug(f"Could not describe project {project.path_with_namespace}: {e}")
            return project

        described = self._parse_records(Project, records)
        return described[0] if described else project

    @staticmethod
    def _unique(projects: List[Project]) -> List[Project]:
        seen = set()
        unique = []
        for project in projects:
            if project.path_with_namespace not in seen:
                seen.add(project.path_with_namespace)
                unique.append(project)
        return unique
