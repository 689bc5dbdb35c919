"""Tests for per-phone level overrides."""

import json
import os

import pytest

from src.core.config import settings
from src.core.errors import ConfigurationError
from src.services import level_override_service


def _write_levels(content: object) -> None:
    settings.levels_file.write_text(json.dumps(content), encoding="utf-8")


@pytest.mark.unit
def test_missing_file_means_no_overrides():
    assert level_override_service.get_levels_for_phone("9842470497") == {}


@pytest.mark.unit
def test_phone_block_takes_precedence_over_default():
    _write_levels(
        {
            "default": {"cooking-basic-meal": {"status": "approved"}},
            "9842470497": {"public-speaking": {"status": "under_evaluation", "paymentStatus": "allotted"}},
        }
    )

    levels = level_override_service.get_levels_for_phone("9842470497")

    assert list(levels) == ["public-speaking"]
    assert levels["public-speaking"].status == "under_evaluation"
    assert levels["public-speaking"].payment_status == "allotted"


@pytest.mark.unit
def test_unknown_phone_falls_back_to_default():
    _write_levels({"default": {"cooking-basic-meal": {"status": "approved", "paymentStatus": "paid"}}})

    levels = level_override_service.get_levels_for_phone("1234567890")

    assert levels["cooking-basic-meal"].payment_status == "paid"


@pytest.mark.unit
def test_no_default_block_means_empty():
    _write_levels({"9842470497": {"basic-coding": {"status": "approved"}}})

    assert level_override_service.get_levels_for_phone("1234567890") == {}


@pytest.mark.unit
def test_unknown_override_fields_are_kept():
    _write_levels({"default": {"basic-coding": {"status": "approved", "note": "manual"}}})

    override = level_override_service.get_levels_for_phone("1234567890")["basic-coding"]

    assert override.model_extra == {"note": "manual"}


@pytest.mark.unit
def test_invalid_json_raises_configuration_error():
    settings.levels_file.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        level_override_service.load_levels()


@pytest.mark.unit
def test_wrong_shape_raises_configuration_error():
    _write_levels(["9842470497"])

    with pytest.raises(ConfigurationError):
        level_override_service.load_levels()


@pytest.mark.unit
def test_file_is_reread_after_edit():
    _write_levels({"default": {"basic-coding": {"status": "approved"}}})
    assert level_override_service.get_levels_for_phone("1234567890")["basic-coding"].status == "approved"

    _write_levels({"default": {"basic-coding": {"status": "rejected"}}})
    stat = settings.levels_file.stat()
    os.utime(settings.levels_file, (stat.st_atime, stat.st_mtime + 10))

    assert level_override_service.get_levels_for_phone("1234567890")["basic-coding"].status == "rejected"


@pytest.mark.unit
def test_explicit_path_argument(tmp_path):
    other = tmp_path / "other_levels.json"
    other.write_text(json.dumps({"default": {"fitness-routine": {"status": "approved"}}}), encoding="utf-8")

    levels = level_override_service.get_levels_for_phone("1234567890", path=other)

    assert "fitness-routine" in levels
