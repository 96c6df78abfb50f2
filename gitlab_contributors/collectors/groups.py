from typing import List
from loguru import logger

from gitlab_contributors.collectors.base_collector import BaseCollector
from gitlab_contributors.collectors.paged_fetcher import UpstreamFetchFailure
from gitlab_contributors.models.schemas import Group


class GroupExpander(BaseCollector):
    """Resolves a group name search into matching groups"""

    def collect(self, query: str) -> List[Group]:
        """Search all available groups for ``query``; returns [] on failure"""
        try:
            records = self._make_api_call(
                '/groups',
                'Groups',
                {'all_available': 'true', 'search': query}
            )
        except UpstreamFetchFailure as e:
            self._report_failure(f"Failed to retrieve group '{query}' from GitLab", e)
            return []

        groups = self._parse_records(
            Group,
            records,
            required=lambda r: bool(r.get('id') and r.get('name') and r.get('full_path'))
        )
        logger.debug(f"Group search '{query}' matched {len(groups)} group(s)")
        return groups
