"""Invoice numbering configuration."""

import os
import logging
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from core.models import Scope
from utils.timezone import get_zone

logger = logging.getLogger(__name__)

_ENV_FIELDS = {
    "INVOICE_SEQ_FILE": "counter_file",
    "INVOICE_SEQ_SCOPE": "scope",
    "INVOICE_SEQ_PAD": "pad",
    "INVOICE_SEQ_PREFIX": "prefix",
    "INVOICE_TIMEZONE": "timezone",
    "INVOICE_SEQ_LOCK_RETRIES": "lock_retries",
    "INVOICE_SEQ_LOCK_DELAY_MS": "lock_retry_delay_ms",
    "INVOICE_SEQ_LOCK_STALE_SECONDS": "lock_stale_seconds",
}


class NumberingConfig(BaseModel):
    """
    Invoice numbering configuration.

    Per-call SequenceOptions override the sequence fields
    (counter_file, scope, pad, prefix).
    """

    counter_file: str = Field(
        default=".seq.json",
        description="JSON file holding the counters, relative to the working directory",
        min_length=1,
    )
    scope: Scope = Field(
        default=Scope.MONTH,
        description="How often the counter restarts",
    )
    pad: int = Field(
        default=4,
        description="Zero-padding width of the sequence part",
        ge=1,
        le=12,
    )
    prefix: str = Field(
        default="",
        description="Text placed before the date segment",
        max_length=50,
    )
    timezone: str | None = Field(
        default=None,
        description="IANA zone for 'today' when no date is given; None = host local time",
    )

    # Lock marker
    lock_retries: int = Field(
        default=50,
        description="Attempts to create the lock marker before running unprotected",
        ge=1,
        le=10000,
    )
    lock_retry_delay_ms: int = Field(
        default=20,
        description="Pause between lock attempts",
        ge=1,
        le=5000,
    )
    lock_stale_seconds: float | None = Field(
        default=None,
        description="Remove lock markers older than this; None disables expiry",
        gt=0,
    )

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, value: str | None) -> str | None:
        if value:
            get_zone(value)
        return value or None


def load_config(env_file: str | Path | None = None) -> NumberingConfig:
    """
    Build config from environment variables.

    Args:
        env_file: Optional .env file loaded first (existing env vars win)

    Raises:
        pydantic.ValidationError: If a value is out of range or malformed
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)

    values = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw.strip() != "":
            values[field_name] = raw.strip()

    config = NumberingConfig(**values)
    logger.info(
        f"Numbering config: file={config.counter_file} scope={config.scope.value} "
        f"pad={config.pad} prefix={config.prefix!r}"
    )
    return config
