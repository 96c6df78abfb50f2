from typing import Any, Dict, List, Optional, Tuple
from loguru import logger

from gitlab_contributors.collectors.base_collector import BaseCollector
from gitlab_contributors.collectors.groups import GroupExpander
from gitlab_contributors.collectors.paged_fetcher import PagedFetcher, UpstreamFetchFailure
from gitlab_contributors.models.schemas import Project, TargetSpec

PUBLIC_INSTANCE_HOST = 'gitlab.com'


class ProjectResolver(BaseCollector):
    """Turns a target specification into the list of projects to scan"""

    def __init__(self, target: TargetSpec, fetcher: Optional[PagedFetcher] = None,
                 group_expander: Optional[GroupExpander] = None):
        super().__init__(target, fetcher)
        self.group_expander = group_expander or GroupExpander(target, self.fetcher)

    def collect(self) -> List[Project]:
        """Resolve projects for the target's mode.

        The same project may come back once per source that lists it.
        """
        if self.target.mode == 'project':
            logger.debug("Counting contributors for single project")
            return [Project(path_with_namespace=self.target.project)]

        if self.target.mode == 'groups':
            group_paths = self.resolve_group_paths(self.target.groups)
            if not group_paths:
                logger.warning(f"No groups matched {', '.join(self.target.groups)}")
                return []
            sources = [(f"/groups/{path}/projects", f"Projects of group {path}", {}) for path in group_paths]
            user_source = self._user_projects_source()
            if user_source:
                sources.append(user_source)
        else:
            sources = [self._visible_projects_source()]

        projects = []
        for path, context, params in sources:
            projects.extend(self._fetch_projects(path, context, params))

        logger.debug(f"Found {len(projects)} projects")
        return projects

    def resolve_group_paths(self, queries: List[str]) -> List[str]:
        """Expand group queries into URL-encoded canonical group paths"""
        groups = []
        for query in queries:
            groups.extend(self.group_expander.collect(query))
        logger.debug(f"Found {len(groups)} groups")
        return [group.encoded_path for group in groups]

    def _visible_projects_source(self) -> Tuple[str, str, Dict[str, Any]]:
        # Without membership=true gitlab.com lists every public project on the instance
        if PUBLIC_INSTANCE_HOST in self.target.host:
            return '/projects', 'Projects', {'membership': 'true'}
        return '/projects', 'Projects', {}

    def _user_projects_source(self) -> Optional[Tuple[str, str, Dict[str, Any]]]:
        user_id = self._current_user_id()
        if user_id is None:
            return None
        return f"/users/{user_id}/projects", 'Projects of current user', {}

    def _current_user_id(self) -> Optional[int]:
        try:
            users = self._make_api_call('/user', 'User')
        except UpstreamFetchFailure as e:
            self._report_failure("Failed to retrieve current user from GitLab", e)
            return None

        if not users or users[0].get('id') is None:
            logger.error("GitLab returned no current user; skipping personal projects")
            return None
        return users[0]['id']

    def _fetch_projects(self, path: str, context: str, params: Dict[str, Any]) -> List[Project]:
        try:
            records = self._make_api_call(path, context, params)
        except UpstreamFetchFailure as e:
            self._report_failure(f"Failed to retrieve project list from GitLab ({context})", e)
            return []

        return self._parse_records(
            Project,
            records,
            required=lambda r: bool(r.get('path_with_namespace') and r.get('id'))
        )
