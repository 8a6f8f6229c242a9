"""
Configuration management for the tlidb item sync.

This module provides centralized configuration management with environment variable support,
validation, and different configuration profiles for development, testing, and production.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentType(str, Enum):
    """
    Environment types for different deployment scenarios.

    @description Defines the available environment types for configuration profiles
    """

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class CrawlerConfig(BaseSettings):
    """
    Item database crawler configuration settings.

    @description Manages the source site, category pages, link filtering and request pacing
    @param base_url: Site root that relative item links are resolved against
    @param categories: Ordered category paths whose pages list item links
    @param link_prefix: Locale prefix every item link must start with
    @param excluded_sections: Path fragments marking navigation links rather than items
    @param min_link_length: Links must be strictly longer than this
    @param max_links_per_category: Cap on item pages visited per category
    @param request_delay: Delay before each item page fetch in seconds
    @param timeout: Request timeout in seconds, None waits indefinitely
    @param user_agent: User agent string for requests
    """

    model_config = SettingsConfigDict(
        env_prefix="CRAWLER_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    base_url: str = "https://tlidb.com"
    categories: List[str] = Field(
        default_factory=lambda: ["/en/Inventory", "/en/Drop_Source"]
    )
    link_prefix: str = "/en/"
    excluded_sections: List[str] = Field(
        default_factory=lambda: ["/Hero", "/Talent", "/Skill", "/Craft"]
    )
    min_link_length: int = 5
    max_links_per_category: int = 50
    request_delay: float = 0.5
    timeout: Optional[float] = None

    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    accept_language: str = "en-US,en;q=0.9"

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @field_validator("request_delay")
    @classmethod
    def validate_delay(cls, v):
        """
        Validate request delay.

        @description Ensures the delay between requests is not negative
        @param v: The value to validate
        @returns: Validated value
        @throws ValueError: If value is negative
        """
        if v < 0:
            raise ValueError("Request delay cannot be negative")
        return v

    @field_validator("max_links_per_category")
    @classmethod
    def validate_link_cap(cls, v):
        if v < 1:
            raise ValueError("Link cap per category must be at least 1")
        return v

    def get_headers(self) -> dict:
        """
        Get the request headers sent with every page fetch.

        @description The item site may reject or alter responses for requests
        that do not look like a desktop browser
        @returns: Dictionary of header names to values
        """
        return {
            "User-Agent": self.user_agent,
            "Accept": self.accept,
            "Accept-Language": self.accept_language,
        }


class SupabaseConfig(BaseSettings):
    """
    Supabase REST configuration for the item table.

    @description Manages the PostgREST endpoint, credentials and upsert behavior
    @param url: Supabase project URL
    @param anon_key: API key sent as both the apikey header and the bearer token
    @param table: Table receiving item upserts
    @param conflict_column: Unique column upserts merge on
    @param sync_delay: Delay after each upsert in seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    url: str = "https://tgclfnahahemystgvkhc.supabase.co"
    anon_key: str = ""
    table: str = "tli_game_items"
    conflict_column: str = "game_id"
    sync_delay: float = 0.1

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @field_validator("sync_delay")
    @classmethod
    def validate_delay(cls, v):
        if v < 0:
            raise ValueError("Sync delay cannot be negative")
        return v

    def get_rest_url(self) -> str:
        """
        Get the REST collection endpoint for the item table.

        @example
        # Returns: https://<project>.supabase.co/rest/v1/tli_game_items
        """
        return f"{self.url}/rest/v1/{self.table}"


class Settings(BaseSettings):
    """
    Main application settings container.

    @description Central configuration class that aggregates all configuration sections
    and provides environment-specific settings management
    @param environment: Current environment type
    @param log_level: Logging level
    @param log_format: Log message format
    @param log_file: Optional path of a rotating log file
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    environment: EnvironmentType = EnvironmentType.DEVELOPMENT
    log_level: str = "INFO"
    log_format: str = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    log_file: Optional[str] = None

    # Configuration sections
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)

    def __init__(self, **kwargs):
        """
        Initialize settings with environment-specific defaults.

        @description Creates settings instance and applies environment-specific configurations
        @param kwargs: Optional configuration overrides
        """
        super().__init__(**kwargs)
        self._apply_environment_settings()

    def _apply_environment_settings(self) -> None:
        """
        Apply environment-specific configuration adjustments.

        @description Modifies settings based on the current environment type
        """
        if self.environment == EnvironmentType.PRODUCTION:
            self.log_level = "WARNING"
        elif self.environment == EnvironmentType.TESTING:
            # Fake endpoints need no pacing
            self.crawler.request_delay = 0.0
            self.supabase.sync_delay = 0.0
            self.log_level = "DEBUG"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance.

    @description Provides access to the application's configuration settings
    @returns: The global settings instance

    @example
    # Access settings in your application
    config = get_settings()
    table = config.supabase.table
    """
    return settings


def reload_settings() -> Settings:
    """
    Reload settings from environment and configuration files.

    @description Forces a reload of all configuration settings, useful for
    testing or when configuration changes need to be applied at runtime
    @returns: The reloaded settings instance
    """
    global settings
    settings = Settings()
    return settings
