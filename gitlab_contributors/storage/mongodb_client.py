from typing import Optional, Dict, Any
from datetime import datetime, timezone
import pymongo
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from loguru import logger

from gitlab_contributors.config.settings import settings
from gitlab_contributors.models.schemas import AggregationResult, TargetSpec
from gitlab_contributors.storage.report_writer import breakdown_rows


class MongoDBClient:
    """MongoDB sink keeping one snapshot document per aggregation run"""

    def __init__(self):
        self.client: Optional[MongoClient] = None
        self.db: Optional[Database] = None

    @property
    def enabled(self) -> bool:
        return bool(settings.mongodb_uri)

    def connect(self) -> None:
        """Establish connection to MongoDB"""
        try:
            self.client = MongoClient(settings.mongodb_uri)
            self.db = self.client[settings.mongodb_database]

            # Test connection
            self.client.admin.command('ping')
            logger.info(f"Connected to MongoDB at {settings.mongodb_uri}")

            self.get_collection().create_index([('timestamp', pymongo.DESCENDING)])
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    def get_collection(self) -> Collection:
        return self.db[settings.report_collection]

    def save_report(self, result: AggregationResult, target: TargetSpec, since: str) -> str:
        """Insert a snapshot of a finished run"""
        document: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc),
            'since': since,
            'target': {
                'url': target.host,
                'mode': target.mode,
                'project': target.project,
                'groups': target.groups,
            },
            'contributors': [
                {'name': name, **c.model_dump(by_alias=True)}
                for name, c in result.contributors.items()
            ],
            'extensions': result.extensions,
            'breakdown': breakdown_rows(result),
            'projects_scanned': result.projects_scanned,
            'projects_failed': result.projects_failed,
        }

        inserted = self.get_collection().insert_one(document)
        logger.info(f"Saved report to {settings.report_collection}: {inserted.inserted_id}")
        return str(inserted.inserted_id)

    def close(self) -> None:
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            self.client = None
            logger.info("Closed MongoDB connection")


# Global instance
mongodb_client = MongoDBClient()
