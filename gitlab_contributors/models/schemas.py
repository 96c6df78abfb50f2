from typing import List, Optional, Dict
from urllib.parse import quote
from pydantic import BaseModel, ConfigDict, Field, model_validator


class TargetSpec(BaseModel):
    """What to scan: a single project, a list of groups, or everything visible"""
    url: str
    token: str
    project: Optional[str] = None
    groups: Optional[List[str]] = None

    @model_validator(mode='after')
    def check_single_mode(self) -> 'TargetSpec':
        if self.project and self.groups:
            raise ValueError("Specify either a project or groups, not both")
        return self

    @property
    def host(self) -> str:
        return self.url.rstrip('/')

    @property
    def mode(self) -> str:
        if self.project:
            return 'project'
        if self.groups:
            return 'groups'
        return 'all'


class Group(BaseModel):
    """Group returned by a directory search"""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    full_path: str

    @property
    def encoded_path(self) -> str:
        return quote(self.full_path, safe='')


class Project(BaseModel):
    """Project to scan, addressed by its namespaced path"""
    model_config = ConfigDict(frozen=True)

    path_with_namespace: str
    id: Optional[int] = None
    visibility: Optional[str] = None
    default_branch: Optional[str] = None

    @property
    def encoded_path(self) -> str:
        return quote(self.path_with_namespace, safe='')

    @property
    def label(self) -> str:
        """Label used in a contributor's repo list, e.g. ``org/repo(private)``"""
        return f"{self.path_with_namespace}({self.visibility or 'unknown'})"


class Commit(BaseModel):
    """Single commit as listed by the repository commits endpoint"""
    id: str
    author_name: str = ''
    author_email: str = ''


class DiffEntry(BaseModel):
    """One changed file of a commit diff"""
    old_path: str
    new_path: Optional[str] = None


class Contributor(BaseModel):
    """Aggregated activity of one contributor identity"""
    model_config = ConfigDict(populate_by_name=True)

    email: str
    contributions_count: int = Field(default=0, alias='contributionsCount')
    repos_contributed_to: List[str] = Field(default_factory=list, alias='reposContributedTo')


class AggregationResult(BaseModel):
    """Output of one aggregation run"""
    contributors: Dict[str, Contributor] = Field(default_factory=dict)
    files_touched: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    extensions: List[str] = Field(default_factory=list)
    projects_scanned: int = 0
    projects_failed: int = 0
