"""Configuration for the fake client."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "FakeSettings",
    "WatchOverflowPolicy",
]


class WatchOverflowPolicy(StrEnum):
    """What to do when a watcher's buffer is full."""

    drop_oldest = "drop-oldest"
    unsubscribe = "unsubscribe"


class FakeSettings(BaseSettings):
    """Settings for an object tracker.

    Values may be set through environment variables with the
    ``SELDON_FAKE_`` prefix, which is convenient for tuning a whole test
    suite without touching fixtures.
    """

    model_config = SettingsConfigDict(
        env_prefix="SELDON_FAKE_", populate_by_name=True
    )

    watch_buffer_size: int = Field(
        100,
        title="Watch buffer size",
        description=(
            "Maximum number of undelivered events held for each watcher"
        ),
        gt=0,
    )

    watch_overflow: WatchOverflowPolicy = Field(
        WatchOverflowPolicy.drop_oldest,
        title="Watch overflow policy",
        description=(
            "Whether a full watcher loses its oldest event or is stopped"
        ),
    )
