"""Configuration management using Pydantic settings.

Two-layer configuration system:
1. Environment: Loads raw values from environment variables (UPPER_CASE)
2. Settings: Clean settings with lowercase fields and derived values
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from metrics_monitor.exceptions import ConfigurationError
from metrics_monitor.naming import DEFAULT_SEPARATOR

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Environment(BaseSettings):
    """Raw environment variable loading."""

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    METRICS_NAME_SEPARATOR: str = Field(default=DEFAULT_SEPARATOR)
    METRICS_SUCCESS_SUFFIX: str = Field(default="Successes")
    METRICS_FAILURE_SUFFIX: str = Field(default="Failures")
    METRICS_PREFIX: str = Field(default="")


class Settings(BaseModel):
    """Metric naming settings with lowercase fields and derived values."""

    model_config = ConfigDict(from_attributes=True)

    name_separator: str = DEFAULT_SEPARATOR
    success_suffix: str = "Successes"
    failure_suffix: str = "Failures"
    root_segments: list[str] = Field(default_factory=list)

    def validate_config(self) -> None:
        errors: list[str] = []

        if not self.name_separator:
            errors.append("METRICS_NAME_SEPARATOR must not be empty")

        if self.success_suffix == self.failure_suffix:
            errors.append(
                "METRICS_SUCCESS_SUFFIX and METRICS_FAILURE_SUFFIX must differ"
            )

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    @classmethod
    def load(cls, env: "Environment | None" = None) -> "Settings":
        if env is None:
            env = Environment()

        # The prefix is written with the configured separator, e.g. "shop/api"
        if env.METRICS_PREFIX and env.METRICS_NAME_SEPARATOR:
            root_segments = env.METRICS_PREFIX.split(env.METRICS_NAME_SEPARATOR)
        elif env.METRICS_PREFIX:
            root_segments = [env.METRICS_PREFIX]
        else:
            root_segments = []

        return cls(
            name_separator=env.METRICS_NAME_SEPARATOR,
            success_suffix=env.METRICS_SUCCESS_SUFFIX,
            failure_suffix=env.METRICS_FAILURE_SUFFIX,
            root_segments=root_segments,
        )
