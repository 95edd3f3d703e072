"""
Configuration module for StoryBridge.

Uses pydantic-settings for environment-based configuration of the
Neo4j connection, HTTP surface, logging and traversal limits.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Traversal limits bound the work a single request can trigger:
    - max_connection_depth: deepest neighbourhood expansion accepted
    - max_path_depth: optional hop bound for shortest-path search
    - neighbor_result_limit: total paths returned by a neighbourhood query
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===========================================
    # SERVICE CONFIGURATION
    # ===========================================
    service_port: int = Field(default=3000, description="Service port")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    # ===========================================
    # NEO4J CONFIGURATION
    # ===========================================
    neo4j_uri: str = Field(
        default="bolt://localhost:7687",
        description="Neo4j Bolt protocol URI",
    )
    neo4j_user: str = Field(default="neo4j", description="Neo4j username")
    neo4j_password: str = Field(
        default="devpassword",
        description="Neo4j password",
    )
    neo4j_database: str = Field(default="neo4j", description="Neo4j database name")
    init_schema_on_startup: bool = Field(
        default=True,
        description="Create constraints and indexes when the app starts",
    )

    # ===========================================
    # LOGGING
    # ===========================================
    log_level: str = Field(default="INFO", description="Root log level")
    log_file_path: str | None = Field(
        default=None,
        description="Rotating JSON log file; disabled when unset",
    )

    # ===========================================
    # PAGINATION & TRAVERSAL LIMITS
    # ===========================================
    default_page_size: int = Field(default=10, ge=0, description="Stories per page")
    default_network_limit: int = Field(
        default=100,
        ge=0,
        description="Users returned by the network endpoint",
    )
    max_connection_depth: int = Field(
        default=4,
        ge=1,
        description="Deepest neighbourhood expansion accepted",
    )
    max_path_depth: int | None = Field(
        default=None,
        ge=1,
        description="Hop bound for shortest-path search (unbounded when unset)",
    )
    neighbor_result_limit: int = Field(
        default=50,
        ge=1,
        description="Total paths returned by a neighbourhood query",
    )

    # ===========================================
    # SCORING
    # ===========================================
    reward_points_per_hop: int = Field(
        default=10,
        ge=0,
        description="Reward points granted per hop of path reduction",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
