"""Application configuration."""
import os
from dataclasses import dataclass
from typing import Optional, Tuple


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RenderConfig:
    """Markdown rendering settings."""

    max_depth: int = 10
    enable_shared_schemas: bool = True

    @classmethod
    def from_env(cls) -> "RenderConfig":
        """Load config from environment variables."""
        return cls(
            max_depth=int(os.getenv("OASDOC_MAX_DEPTH", "10")),
            enable_shared_schemas=_env_bool("OASDOC_SHARED_SCHEMAS", True),
        )


@dataclass
class ExampleConfig:
    """Generated example settings."""

    max_depth: int = 5
    seed: int = 42

    @classmethod
    def from_env(cls) -> "ExampleConfig":
        """Load config from environment variables."""
        return cls(
            max_depth=int(os.getenv("OASDOC_EXAMPLE_DEPTH", "5")),
            seed=int(os.getenv("OASDOC_EXAMPLE_SEED", "42")),
        )


@dataclass
class AppConfig:
    """Application configuration."""

    output_dir: str = "./docs"
    cache_dir: str = "./.cache/openapi"
    timeout: int = 30
    api_user: str = ""  # basic auth for remote documents
    api_password: str = ""
    render: Optional[RenderConfig] = None
    examples: Optional[ExampleConfig] = None

    def __post_init__(self):
        """Fill in defaults."""
        if self.render is None:
            self.render = RenderConfig.from_env()
        if self.examples is None:
            self.examples = ExampleConfig.from_env()

    @property
    def credentials(self) -> Optional[Tuple[str, str]]:
        """Basic auth pair, or None when no user is configured."""
        if not self.api_user:
            return None
        return (self.api_user, self.api_password)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load config from environment variables."""
        return cls(
            output_dir=os.getenv("OASDOC_OUTPUT_DIR", "./docs"),
            cache_dir=os.getenv("OASDOC_CACHE_DIR", "./.cache/openapi"),
            timeout=int(os.getenv("OASDOC_TIMEOUT", "30")),
            api_user=os.getenv("OASDOC_API_USER", ""),
            api_password=os.getenv("OASDOC_API_PASSWORD", ""),
            render=RenderConfig.from_env(),
            examples=ExampleConfig.from_env(),
        )


# Global instance
app_config = AppConfig.from_env()
