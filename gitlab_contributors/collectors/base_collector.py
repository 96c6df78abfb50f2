from typing import Optional, Dict, Any, List, Type, TypeVar, Callable
from abc import ABC, abstractmethod
from pydantic import BaseModel, ValidationError
from loguru import logger

from gitlab_contributors.config.settings import settings
from gitlab_contributors.collectors.paged_fetcher import PagedFetcher
from gitlab_contributors.models.schemas import TargetSpec

ModelT = TypeVar('ModelT', bound=BaseModel)

VERBOSE_HINT = "Try running with `--log-level DEBUG`"


class BaseCollector(ABC):
    """Base class for GitLab data collectors"""

    def __init__(self, target: TargetSpec, fetcher: Optional[PagedFetcher] = None):
        self.target = target
        self.fetcher = fetcher or PagedFetcher(
            target.token,
            per_page=settings.per_page,
            timeout=settings.request_timeout
        )

    @property
    def api_url(self) -> str:
        return f"{self.target.host}/api/v4"

    def _make_api_call(self, path: str, context: str,
                       params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Fetch every page of an API path; failures propagate to the caller's scope"""
        logger.debug(f"Fetching {context} from {path}")
        return self.fetcher.fetch_all_pages(f"{self.api_url}{path}", context, params)

    @staticmethod
    def _parse_records(model: Type[ModelT], records: List[Dict[str, Any]],
                       required: Optional[Callable[[Dict[str, Any]], bool]] = None) -> List[ModelT]:
        """Build models from raw records, dropping incomplete ones"""
        parsed = []
        dropped = 0
        for record in records:
            if required is not None and not required(record):
                dropped += 1
                continue
            try:
                parsed.append(model.model_validate(record))
            except ValidationError:
                dropped += 1

        if dropped:
            logger.debug(f"Dropped {dropped} malformed {model.__name__} record(s)")
        return parsed

    @staticmethod
    def _report_failure(message: str, error: Exception) -> None:
        """Log a degraded scope: details at debug level, one line at error level"""
        logger.debug(f"{message}.\n{error}")
        logger.error(f"{message}. {VERBOSE_HINT}")

    @abstractmethod
    def collect(self, *args, **kwargs) -> Any:
        """Collect data - to be implemented by subclasses"""
        pass
