import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Providers
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    anthropic_api_key: str | None = os.getenv("ANTHROPIC_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    anthropic_base_url: str = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com/v1")
    anthropic_version: str = os.getenv("ANTHROPIC_VERSION", "2023-06-01")
    max_tokens: int = int(os.getenv("MAX_TOKENS", "512"))
    temperature: float = float(os.getenv("TEMPERATURE", "0.2"))

    # Dispatch
    deprecated_models: str = os.getenv("DEPRECATED_MODELS", "")
    max_concurrency: int = int(os.getenv("MAX_CONCURRENCY", "3"))
    max_models_per_request: int = int(os.getenv("MAX_MODELS_PER_REQUEST", "3"))
    stream_chunk_size: int = int(os.getenv("STREAM_CHUNK_SIZE", "200"))
    invocation_timeout: float = float(os.getenv("INVOCATION_TIMEOUT", "60"))

    # Cache
    cache_ttl: int = int(os.getenv("CACHE_TTL", "1800"))  # 30 minutes
    cache_max_entries: int = int(os.getenv("CACHE_MAX_ENTRIES", "1024"))

    # Likes (in-memory when unset)
    likes_file: str | None = os.getenv("LIKES_FILE")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def deprecated_model_ids(self) -> frozenset[str]:
        """Parse DEPRECATED_MODELS into a set of exact model identifiers.

        Returns:
            Set of identifiers, blanks dropped
        """
        return frozenset(part.strip() for part in self.deprecated_models.split(",") if part.strip())

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.max_concurrency < 1:
            raise ValueError("MAX_CONCURRENCY must be at least 1")

        if self.max_models_per_request < 1:
            raise ValueError("MAX_MODELS_PER_REQUEST must be at least 1")

        if self.stream_chunk_size < 1:
            raise ValueError("STREAM_CHUNK_SIZE must be at least 1")

        if self.cache_ttl <= 0 or self.cache_max_entries <= 0:
            raise ValueError("CACHE_TTL and CACHE_MAX_ENTRIES must be positive")

        if self.invocation_timeout <= 0:
            raise ValueError(f"INVOCATION_TIMEOUT must be positive, got {self.invocation_timeout}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
