"""Per-phone level overrides read from an externally edited ``levels.json``.

File shape::

    {
        "default": {"cooking-basic-meal": {"status": "approved", "paymentStatus": "paid"}},
        "9842470497": {"public-speaking": {"status": "under_evaluation"}}
    }

The overrides only change what the client displays; they are never checked
against or written to the completion ledger.
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, RootModel
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from src.core.config import settings
from src.core.errors import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"


class LevelOverride(BaseModel):
    """Display override for one task."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    status: str | None = Field(default=None, description="Status shown instead of the ledger status")
    payment_status: str | None = Field(default=None, description="Payment status shown instead of the ledger value")


class LevelsFile(RootModel[dict[str, dict[str, LevelOverride]]]):
    """Parsed ``levels.json``: phone (or ``default``) -> task id -> override."""


_cache: dict[str, tuple[float, LevelsFile]] = {}


def load_levels(path: Path | None = None) -> LevelsFile:
    """Read and parse the levels file, re-reading only when its mtime changes.

    A missing file means no overrides.

    Raises:
        ConfigurationError: If the file is not valid JSON of the expected shape
    """
    levels_path = path or settings.levels_file
    cache_key = str(levels_path)

    try:
        mtime = levels_path.stat().st_mtime
    except FileNotFoundError:
        _cache.pop(cache_key, None)
        return LevelsFile({})

    cached = _cache.get(cache_key)
    if cached and cached[0] == mtime:
        return cached[1]

    try:
        raw = json.loads(levels_path.read_text(encoding="utf-8"))
        levels = LevelsFile.model_validate(raw)
    except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
        logger.error("levels_file_invalid", extra={"path": cache_key, "error": str(e)})
        msg = f"Could not read level overrides from {levels_path.name}"
        raise ConfigurationError(msg) from e

    _cache[cache_key] = (mtime, levels)
    logger.info("Loaded level overrides", extra={"path": cache_key, "keys": len(levels.root)})
    return levels


def get_levels_for_phone(phone: str, *, path: Path | None = None) -> dict[str, LevelOverride]:
    """Overrides for ``phone``, falling back to the ``default`` block, else empty."""
    levels = load_levels(path).root
    if phone in levels:
        return levels[phone]
    return levels.get(DEFAULT_KEY, {})
