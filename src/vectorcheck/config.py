"""
Configuration system for vectorcheck using Pydantic.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError


logger = logging.getLogger(__name__)

AI_METHOD = "ai"
FALLBACK_METHOD = "potrace"


class ServiceConfig(BaseModel):
    """Target vectorization service."""

    base_url: str = Field("http://localhost:3000", description="Service base URL")
    timeout: Optional[float] = Field(
        None, description="Total request timeout in seconds (None waits forever)"
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def url(self, path: str) -> str:
        """Join an API path onto the base URL."""
        return f"{self.base_url}/{path.lstrip('/')}"


class Credentials(BaseModel):
    """Login credentials for the authentication endpoint."""

    email: str = Field("demo@example.com", description="Account email")
    password: str = Field("demo123", description="Account password")


class TestCase(BaseModel):
    """One input image and the methods to exercise against it."""

    __test__ = False  # not a pytest class

    model_config = ConfigDict(frozen=True)

    input_file: str = Field(..., description="Image file name inside images_dir")
    edge_case: str = Field("general", description="Quality profile name")
    methods: List[str] = Field(
        default_factory=lambda: [AI_METHOD, FALLBACK_METHOD],
        description="Vectorization methods to run",
    )
    fields: Dict[str, Dict[str, str]] = Field(
        default_factory=dict, description="Extra multipart fields per method"
    )

    @field_validator("methods")
    @classmethod
    def methods_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("at least one method is required")
        return v


def _default_test_cases() -> List[TestCase]:
    return [
        TestCase(input_file="simple-logo.png", edge_case="simple-logo"),
        TestCase(
            input_file="complex-illustration.png",
            edge_case="complex-illustration",
            methods=[AI_METHOD],
        ),
        TestCase(input_file="line-art.png", edge_case="line-art"),
        TestCase(input_file="icon.png", edge_case="icon"),
        TestCase(input_file="high-contrast.png", edge_case="high-contrast"),
    ]


class SuiteConfig(BaseModel):
    """Validation suite configuration."""

    images_dir: str = Field("test-images", description="Directory holding input images")
    output_dir: str = Field("test-output", description="Directory for SVGs and the report")
    delay: float = Field(1.0, description="Pause between test executions in seconds")
    default_fields: Dict[str, str] = Field(
        default_factory=lambda: {"optimize": "true", "removeBackground": "false"},
        description="Multipart fields sent with every vectorize request",
    )
    test_cases: List[TestCase] = Field(
        default_factory=_default_test_cases, description="Test cases to run"
    )

    @field_validator("delay")
    @classmethod
    def delay_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("delay cannot be negative")
        return v


class StressConfig(BaseModel):
    """Stress run configuration."""

    test_image: str = Field("test-image.png", description="Image uploaded by every check")
    background_quality: str = Field(
        "fast", description="Quality field sent to background removal"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", description="Log level"
    )
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file: Optional[str] = Field(None, description="Log file path")
    max_size: int = Field(5242880, description="Max log file size in bytes")  # 5MB
    backup_count: int = Field(5, description="Number of backup log files")


class HarnessConfig(BaseSettings):
    """Main vectorcheck configuration."""

    service: ServiceConfig = Field(
        default_factory=ServiceConfig, description="Target service"
    )
    credentials: Credentials = Field(
        default_factory=Credentials, description="Login credentials"
    )
    suite: SuiteConfig = Field(
        default_factory=SuiteConfig, description="Validation suite configuration"
    )
    stress: StressConfig = Field(
        default_factory=StressConfig, description="Stress run configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    model_config = ConfigDict(
        env_file=".env",
        env_prefix="VECTORCHECK_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "HarnessConfig":
        """Load configuration from a YAML file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            data = cls._expand_env_vars(data)

            return cls(**data)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @classmethod
    def _expand_env_vars(cls, data: Any) -> Any:
        """Recursively expand environment variables in configuration data."""
        if isinstance(data, dict):
            return {k: cls._expand_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls._expand_env_vars(item) for item in data]
        elif isinstance(data, str):
            return os.path.expandvars(data)
        else:
            return data

    def validate_config(self) -> List[str]:
        """
        Validate the configuration for consistency.

        Returns:
            Warnings that do not stop a run

        Raises:
            ConfigurationError: If the configuration cannot be used
        """
        from .quality.profiles import PROFILES

        if not self.service.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Service base_url must be an http(s) URL: {self.service.base_url}"
            )

        warnings = []
        seen = set()
        for case in self.suite.test_cases:
            if case.input_file in seen:
                raise ConfigurationError(
                    f"Test case for '{case.input_file}' is declared more than once"
                )
            seen.add(case.input_file)

            if case.edge_case != "general" and case.edge_case not in PROFILES:
                warnings.append(
                    f"Test case '{case.input_file}' uses unknown edge case "
                    f"'{case.edge_case}'; the general profile will judge it"
                )
            for method in case.fields:
                if method not in case.methods:
                    warnings.append(
                        f"Test case '{case.input_file}' has fields for method "
                        f"'{method}' which it never runs"
                    )
        return warnings

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(mode="json", exclude_none=True),
                f,
                default_flow_style=False,
                indent=2,
                sort_keys=False,
            )
