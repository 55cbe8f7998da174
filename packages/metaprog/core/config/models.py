"""Configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CACHE_DIR = Path(".metaprog")


class ConfigBase(BaseModel):
    """Base class for metaprog configuration sections."""

    model_config = ConfigDict(extra="ignore")  # Forward compatibility


class CacheConfig(ConfigBase):
    """Where the artifact cache lives.

    ``index_path`` and ``generated_dir`` default to locations under ``dir``.
    """

    dir: Path = Field(default=DEFAULT_CACHE_DIR, description="Cache root directory")
    index_path: Path | None = Field(
        default=None, description="Index file (default: <dir>/metaprog-cache.json)"
    )
    generated_dir: Path | None = Field(
        default=None, description="Directory of generated sources (default: <dir>/generated)"
    )

    def resolved_index_path(self) -> Path:
        return self.index_path or self.dir / "metaprog-cache.json"

    def resolved_generated_dir(self) -> Path:
        return self.generated_dir or self.dir / "generated"


class GeneratorConfig(ConfigBase):
    """LLM settings for code generation."""

    provider: str = Field(default="openai", description="LLM provider name")
    model: str = Field(default="gpt-4o", description="LLM model name")
    temperature: float | None = Field(
        default=None, ge=0.0, le=2.0, description="Sampling temperature (provider default if None)"
    )
    api_key: str | None = Field(default=None, description="API key (OPENAI_API_KEY if None)")
    base_url: str | None = Field(default=None, description="Alternate API base URL")
    timeout_seconds: float = Field(default=120.0, gt=0, description="Request timeout")
    max_retries: int = Field(
        default=3, ge=0, description="Client-level retries for network, 429 and 5xx errors"
    )


class BuildConfig(ConfigBase):
    """Build pipeline defaults."""

    retries: int = Field(default=3, ge=0, description="Repair attempts per failing test case")
    verify_cached: bool = Field(
        default=False, description="Re-run declared tests on cache hits"
    )


class LoggingConfig(ConfigBase):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    filename: str | None = None
    structured: bool = False


class AppConfig(ConfigBase):
    """Application configuration."""

    cache: CacheConfig = Field(default_factory=CacheConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
