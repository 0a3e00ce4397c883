"""Configuration management with YAML and environment variable support"""

import os
from typing import Any, Dict, List, Optional, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class BaseConfigSection(BaseSettings):
    """Base class for all config sections with correct environment variable precedence.

    This class customizes the settings source priority to ensure that:
    1. Environment variables have highest priority
    2. Init kwargs (YAML data) have second priority
    3. Default values have lowest priority
    """

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings source priority: env vars > init kwargs > defaults."""
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


class ServerConfig(BaseConfigSection):
    """Server configuration"""

    host: str = (
        "0.0.0.0"  # nosec B104 - Intentional binding to all interfaces for containerized deployment
    )
    port: int = 8000
    workers: int = 4

    model_config = SettingsConfigDict(env_prefix="APP_SERVER_")


class EmbedConfig(BaseConfigSection):
    """Media embedding configuration"""

    default_origin: str = ""
    strict: bool = False  # reject recognized URLs whose media ID can't be extracted
    disabled_platforms: List[str] = Field(default_factory=list)

    model_config = SettingsConfigDict(env_prefix="APP_EMBED_")

    @field_validator("disabled_platforms")
    @classmethod
    def validate_platforms(cls, v: List[str]) -> List[str]:
        valid_platforms = ["youtube", "vimeo", "spotify", "soundcloud", "suno"]
        normalized = [p.lower() for p in v]
        for platform in normalized:
            if platform not in valid_platforms:
                raise ValueError(f"disabled_platforms entries must be one of {valid_platforms}")
        return normalized


class StorageConfig(BaseConfigSection):
    """Object storage and upload configuration"""

    backend: str = "local"
    local_root: str = "/app/uploads"
    public_base_url: str = "http://localhost:8000/uploads"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    request_timeout: float = 30.0  # seconds
    default_bucket: str = "materials"
    max_upload_size: int = 52428800  # 50MB in bytes

    model_config = SettingsConfigDict(env_prefix="APP_STORAGE_")

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        valid_backends = ["local", "supabase", "memory"]
        v_lower = v.lower()
        if v_lower not in valid_backends:
            raise ValueError(f"backend must be one of {valid_backends}")
        return v_lower

    @field_validator("max_upload_size")
    @classmethod
    def validate_max_upload_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_upload_size must be positive")
        return v


class LoggingConfig(BaseConfigSection):
    """Logging configuration"""

    level: str = "INFO"
    format: str = "json"

    model_config = SettingsConfigDict(env_prefix="APP_LOGGING_")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}")
        return v_upper


class SecurityConfig(BaseConfigSection):
    """Security configuration"""

    api_keys: List[str] = Field(default_factory=list)
    allow_degraded_start: bool = False
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(env_prefix="APP_SECURITY_")


class MonitoringConfig(BaseConfigSection):
    """Monitoring configuration"""

    metrics_enabled: bool = True

    model_config = SettingsConfigDict(env_prefix="APP_MONITORING_")


class Config(BaseSettings):
    """Main application configuration"""

    server: ServerConfig = Field(default_factory=ServerConfig)
    embed: EmbedConfig = Field(default_factory=EmbedConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="APP_")


class ConfigService:
    """Service for loading and managing configuration"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.environ.get("APP_CONFIG_PATH", "config.yaml")
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """Load configuration from YAML file with environment variable overrides.

        Environment variables take precedence over YAML values, which in turn
        take precedence over defaults (see BaseConfigSection).
        """
        config_data: Dict[str, Any] = {}

        if os.path.exists(self.config_path):
            with open(self.config_path, "r", encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f)
                if yaml_data:
                    config_data = yaml_data

        self._config = Config(
            server=ServerConfig(**config_data.get("server", {})),
            embed=EmbedConfig(**config_data.get("embed", {})),
            storage=StorageConfig(**config_data.get("storage", {})),
            logging=LoggingConfig(**config_data.get("logging", {})),
            security=SecurityConfig(**config_data.get("security", {})),
            monitoring=MonitoringConfig(**config_data.get("monitoring", {})),
        )

        return self._config

    def validate(self) -> bool:
        """Validate the loaded configuration"""
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load() first.")

        if not self._config.security.api_keys and not self._config.security.allow_degraded_start:
            raise ValueError("At least one API key must be configured")

        storage = self._config.storage
        if storage.backend == "supabase" and not (storage.supabase_url and storage.supabase_key):
            raise ValueError("supabase_url and supabase_key are required for the supabase backend")

        return True

    @property
    def config(self) -> Config:
        """Get the loaded configuration"""
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load() first.")
        return self._config
