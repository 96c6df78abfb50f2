from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables
env_path = Path(__file__).parent.parent.parent / '.env'
load_dotenv(env_path)

TOKEN_PLACEHOLDER = 'your_gitlab_personal_access_token_here'


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

    # GitLab API
    gitlab_token: str = Field(default='')
    gitlab_url: str = Field(default='https://gitlab.com')
    per_page: int = Field(default=100)
    request_timeout: float = Field(default=30.0)

    # Aggregation
    window_days: int = Field(default=90)
    excluded_email_suffixes: List[str] = Field(default_factory=lambda: ['@users.noreply.github.com'])
    excluded_emails: List[str] = Field(default_factory=lambda: ['snyk-bot@snyk.io'])
    duplicate_marker: str = Field(default='(duplicate)')

    # Reports
    breakdown_csv: str = Field(default='contributor-breakdown.csv')

    # MongoDB report sink
    mongodb_uri: Optional[str] = Field(default=None)
    mongodb_database: str = Field(default='gitlab_contributors')
    report_collection: str = Field(default='contributor_reports')

    # Logging
    log_level: str = Field(default='INFO')
    log_file: Optional[str] = Field(default='logs/gitlab_contributors.log')


# Create global settings instance
settings = Settings()


def validate_settings(token: Optional[str] = None):
    """Validate critical settings"""
    token = settings.gitlab_token if token is None else token
    if not token or token == TOKEN_PLACEHOLDER:
        raise ValueError("Please set GITLAB_TOKEN in your .env file or pass --token")

    if not settings.gitlab_url:
        raise ValueError("Please set GITLAB_URL in your .env file")

    return True
