"""
Configuration settings for the Innsyn postjournal service
Handles environment variables and configuration management
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load environment variables
# Look for .env file in the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


class SupabaseSettings(BaseSettings):
    """Supabase backend configuration"""

    url: str = ""
    anon_key: str = ""
    service_role_key: Optional[str] = None
    dispatch_function: str = "send_innsyn_request"
    postgrest_timeout: int = 30
    function_timeout: int = 30

    class Config:
        env_prefix = "SUPABASE_"

    @property
    def is_configured(self) -> bool:
        """Check if URL and a key are present"""
        return bool(self.url and (self.anon_key or self.service_role_key))


class DatabaseSettings(BaseSettings):
    """Database configuration for the SQL record store"""

    url: str = "postgresql://localhost/innsyn"
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10

    class Config:
        env_prefix = "DATABASE_"


class InnsynSettings(BaseSettings):
    """Disclosure request and feed configuration"""

    request_source: str = "entries"
    default_request_type: str = "postjournal"
    feed_limit: int = Field(25, ge=1)
    jobs_limit: int = Field(250, ge=1)
    page_size: int = Field(100, ge=1)
    contacts_extra_json: str = ""

    class Config:
        env_prefix = "INNSYN_"

    @field_validator("contacts_extra_json")
    @classmethod
    def validate_contacts_json(cls, v: str) -> str:
        """Ensure the extra contact table is a JSON object of strings"""
        if not v or not v.strip():
            return ""
        parsed = json.loads(v)
        if not isinstance(parsed, dict) or not all(
            isinstance(k, str) and isinstance(val, str) for k, val in parsed.items()
        ):
            raise ValueError("INNSYN_CONTACTS_EXTRA_JSON must map authority names to emails")
        return v

    @property
    def extra_contacts(self) -> Dict[str, str]:
        """Extra authority -> email pairs, in declaration order"""
        if not self.contacts_extra_json:
            return {}
        return json.loads(self.contacts_extra_json)


class SessionSettings(BaseSettings):
    """Local session token storage"""

    state_dir: Path = Path(".innsyn")
    session_key: str = "nj_session_id"

    # Command line sign-in (Supabase backend) or fixed user (SQL backend)
    email: Optional[str] = None
    password: Optional[str] = None
    user_id: Optional[str] = None

    class Config:
        env_prefix = "SESSION_"


class LoggingSettings(BaseSettings):
    """Logging configuration"""

    level: str = "INFO"
    log_dir: Path = Path("logs")
    json_file: bool = True
    max_size_mb: int = 10
    backup_count: int = 5

    class Config:
        env_prefix = "LOG_"


class Settings(BaseSettings):
    """Main settings class aggregating all configurations"""

    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    innsyn: InnsynSettings = Field(default_factory=InnsynSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Application settings
    app_name: str = "innsyn"
    environment: str = "development"
    debug: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment.lower() == "production"

    def get_database_url(self, async_driver: bool = True) -> str:
        """Get database URL with appropriate driver"""
        url = self.database.url
        if async_driver and url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    def validate_config(self) -> List[str]:
        """Return a list of configuration problems (empty when usable)"""
        errors = []

        if not self.supabase.url:
            errors.append("Supabase URL not configured")

        if not (self.supabase.anon_key or self.supabase.service_role_key):
            errors.append("Supabase key not configured")

        if self.is_production and self.debug:
            errors.append("Debug mode enabled in production")

        return errors

    def get_config_summary(self) -> Dict[str, Any]:
        """Get configuration summary for logging"""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "debug": self.debug,
            "supabase_configured": self.supabase.is_configured,
            "dispatch_function": self.supabase.dispatch_function,
            "database_configured": bool(self.database.url),
            "request_source": self.innsyn.request_source,
            "feed_limit": self.innsyn.feed_limit,
            "extra_contacts": len(self.innsyn.extra_contacts),
        }


# Create global settings instance
settings = Settings()
