"""
Inpatient Export Configuration
Settings for the RIF inpatient claim exporter.
Source: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
Verified: 2026-10-18
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExportSettings(BaseSettings):
    """
    Inpatient claim export settings.

    All values can be supplied through environment variables prefixed
    with ``RIF_`` or through a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="RIF_",
    )

    # =========================================================================
    # Claim Eligibility
    # =========================================================================
    CLAIM_CUTOFF_DATE: date = Field(
        default=date(2014, 5, 29),
        description="Encounters that stop before this date are never exported",
    )
    PART_AB_PAYERS: str = Field(
        default="Medicare",
        description="Comma-separated payer names that provide Part A/B coverage",
    )
    PRIMARY_GOVERNMENT_PAYER: str = Field(
        default="Medicare",
        description="Payer whose government plan is the primary payer",
    )

    # =========================================================================
    # Identifier Counters
    # =========================================================================
    CLAIM_ID_START: int = Field(
        default=-1,
        description="First claim id issued (ids decrease from here)",
    )
    CLAIM_GROUP_ID_START: int = Field(
        default=-1,
        description="First claim group id issued",
    )
    FI_DOC_CNTL_NUM_START: int = Field(
        default=-1,
        description="First FI document control number issued",
    )

    # =========================================================================
    # Business Rules
    # =========================================================================
    COST_OUTLIER_THRESHOLD: Decimal = Field(
        default=Decimal("100000.00"),
        ge=0,
        description="Total claim cost above which a stay is a cost outlier",
    )
    COINSURANCE_DAY_THRESHOLD: int = Field(
        default=60,
        ge=0,
        description="Utilization days after which coinsurance days accrue",
    )
    PROVIDER_NUM_WIDTH: int = Field(
        default=6,
        ge=1,
        description="Width of the PRVDR_NUM field",
    )

    # =========================================================================
    # Concurrency
    # =========================================================================
    MAX_CONCURRENT_PATIENTS: int = Field(
        default=10,
        ge=1,
        description="Patients exported at the same time",
    )
    BATCH_SIZE: int = Field(
        default=100,
        ge=1,
        description="Patients scheduled per batch",
    )

    # =========================================================================
    # Output and Reference Data
    # =========================================================================
    OUTPUT_DIR: str = Field(
        default="output/bfd",
        description="Directory for delimited record files",
    )
    FIELD_DELIMITER: str = Field(
        default="|",
        min_length=1,
        max_length=1,
        description="Delimiter used by the delimited file sink",
    )
    STATIC_FIELD_CONFIG: Optional[str] = Field(
        default=None,
        description="Tab-separated file of static field defaults",
    )
    CODE_MAP_DIR: Optional[str] = Field(
        default=None,
        description="Directory holding the JSON code mapping tables",
    )

    # =========================================================================
    # Logging
    # =========================================================================
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FILE: Optional[str] = Field(default=None, description="Optional log file path")
    JSON_LOGS: bool = Field(default=False, description="Emit logs as JSON")

    # =========================================================================
    # Validators
    # =========================================================================
    @field_validator("CLAIM_ID_START", "CLAIM_GROUP_ID_START", "FI_DOC_CNTL_NUM_START")
    @classmethod
    def validate_counter_start(cls, v: int) -> int:
        """Synthetic identifiers live in the negative range."""
        if v > 0:
            raise ValueError("identifier counters must start at zero or below")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    @property
    def part_ab_payers_list(self) -> list[str]:
        """Get Part A/B payer names as a list."""
        return [p.strip() for p in self.PART_AB_PAYERS.split(",") if p.strip()]


# Singleton instance
_export_settings: Optional[ExportSettings] = None


def get_export_settings() -> ExportSettings:
    """
    Get cached export settings instance.

    Returns:
        ExportSettings instance
    """
    global _export_settings
    if _export_settings is None:
        _export_settings = ExportSettings()
    return _export_settings


def reset_export_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _export_settings
    _export_settings = None
