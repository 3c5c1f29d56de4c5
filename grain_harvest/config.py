"""Application configuration and environment settings"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from grain_harvest.grain import DECIMAL_PRECISION


class Settings(BaseSettings):
    """Settings loaded from GRAIN_* environment variables"""

    # Display settings used when amounts are written to logs
    DISPLAY_DECIMALS: int = Field(3, ge=0, le=DECIMAL_PRECISION, description="Decimal places shown for grain amounts")
    DISPLAY_SUFFIX: str = Field("g", description="Suffix appended to displayed grain amounts")

    model_config = SettingsConfigDict(
        env_prefix='GRAIN_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )


settings = Settings()
