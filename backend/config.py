"""
Dataset Analyzer Configuration

Application settings plus the analysis policy: every heuristic threshold the
engine uses is a named, overridable value rather than an inline literal.

Set via environment variables or .env file. Nested policy values use a
double underscore, e.g. ANALYSIS__SMALL_GROUP_PERCENT=3.
"""
from pathlib import Path
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Literal, Optional


MB = 1024 * 1024


class AnalysisPolicy(BaseModel):
    """Heuristic thresholds for the statistical engine"""
    model_config = ConfigDict(frozen=True)

    # Column type inference
    numeric_ratio: float = 0.8  # share of values that must parse as numbers
    categorical_unique_ratio: float = 0.1  # unique / non-null must be below this
    categorical_max_unique: int = 50  # and unique count below this

    # Privacy
    identifier_uniqueness: float = 0.95
    quasi_identifier_lower: float = 0.3
    quasi_identifier_upper: float = 0.95
    identifier_patterns: List[str] = [
        r"id|identifier|key",
        r"name|firstname|lastname",
        r"email|mail",
        r"phone|tel",
    ]

    # Bias
    demographic_pattern: str = r"gender|sex|age|race|country|income|education"
    small_group_percent: float = 5.0
    dominant_group_percent: float = 80.0

    # Quality / distribution
    consistency_null_penalty: float = 30.0
    top_values_limit: int = 5
    outlier_iqr_multiplier: float = 1.5

    # Upload limits
    max_file_bytes: int = 100 * MB
    warn_file_bytes: int = 50 * MB

    # Profile columns on a thread pool once the table is this wide
    parallel_column_threshold: int = 64


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # App
    APP_NAME: str = "Dataset Analyzer"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Logging
    LOGS_DIR: Path = Path("./logs")
    LOG_TO_FILE: bool = True

    # Worker pool for parsing and profiling
    ANALYSIS_WORKERS: int = 4

    # Sessions kept in memory; the least recently used is evicted past this
    MAX_SESSIONS: int = 100

    # ===================
    # Ethical analysis service
    # ===================
    # Full endpoint URL; None disables the call (statistics-only results)
    ETHICS_SERVICE_URL: Optional[str] = None
    ETHICS_TIMEOUT_SECONDS: float = 20.0

    # ===================
    # Analysis policy
    # ===================
    ANALYSIS: AnalysisPolicy = AnalysisPolicy()

    # ===================
    # CORS
    # ===================
    # Comma-separated in .env, parsed as list
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def max_upload_mb(self) -> int:
        """Hard upload limit in MB"""
        return self.ANALYSIS.max_file_bytes // MB

    @field_validator("LOGS_DIR", mode="before")
    @classmethod
    def ensure_path(cls, v):
        """Convert string to Path"""
        return Path(v) if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()


settings = get_settings()
