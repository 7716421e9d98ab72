"""Environment configuration using Pydantic Settings v2."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Credentials, endpoints and batch defaults with environment variable support.

    Settings are read once at the application edge and passed explicitly
    to the components that need them.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Data sources
    fmp_api_key: Optional[str] = Field(default=None, alias="FMP_API_KEY")
    fmp_base_url: str = Field(
        default="https://financialmodelingprep.com/api/v3",
        alias="FMP_BASE_URL",
    )

    # Result store
    result_store_url: Optional[str] = Field(default=None, alias="RESULT_STORE_URL")
    result_store_api_key: Optional[str] = Field(
        default=None, alias="RESULT_STORE_API_KEY"
    )

    # HTTP
    http_timeout: float = Field(default=30.0, alias="TRADESCORE_HTTP_TIMEOUT")

    # Batch defaults
    max_concurrent: int = Field(default=3, ge=1, alias="TRADESCORE_MAX_CONCURRENT")
    max_retries: int = Field(default=3, ge=0, alias="TRADESCORE_MAX_RETRIES")
    retry_delay: float = Field(default=2.0, ge=0, alias="TRADESCORE_RETRY_DELAY")
    recency_hours: float = Field(default=1.0, ge=0, alias="TRADESCORE_RECENCY_HOURS")
    request_delay: float = Field(default=0.5, ge=0, alias="TRADESCORE_REQUEST_DELAY")
    batch_size: Optional[int] = Field(default=None, ge=1, alias="TRADESCORE_BATCH_SIZE")
    inter_batch_delay: float = Field(
        default=3.0, ge=0, alias="TRADESCORE_INTER_BATCH_DELAY"
    )
    lookback_days: int = Field(default=200, ge=1, alias="TRADESCORE_LOOKBACK_DAYS")
    benchmark_symbol: str = Field(default="SPY", alias="TRADESCORE_BENCHMARK")

    # Logging
    log_level: str = Field(default="INFO", alias="TRADESCORE_LOG_LEVEL")

    @property
    def has_result_store(self) -> bool:
        """Whether a remote result store is configured."""
        return bool(self.result_store_url and self.result_store_api_key)
