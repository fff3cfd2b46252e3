"""Base Pydantic models.

This module defines the foundational model classes used by patterns,
run results and settings. It enforces immutability and strict schema
validation so that produced results are write-once snapshots.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for patterns and results.

    Instances are frozen: run results are snapshots, and compiled
    patterns are shared freely between steps. Unknown fields are
    rejected, so a misspelled keyword fails loudly.

    Arbitrary types are allowed: results carry exceptions and steps
    carry callables.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Resolved settings are frozen. Unknown fields are ignored, so
    unrelated `KREPKO_*` variables do not break resolution.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
