from datetime import datetime, timedelta, timezone

import pytest

from journal_core.filters.offset_pagination import OffsetPagination
from journal_core.models.errors import ValidationError
from journal_core.utils.formatting import format_count, format_time_ago
from journal_core.utils.mime import detect_mime_type, extension_for
from journal_core.utils.time import parse_iso, utc_now_iso
from journal_core.utils.validators import validate_input
from journal_features.photos.models import PhotoDraft

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "count, expected",
    [(None, "0"), (0, "0"), (999, "999"), (1_530, "1.5K"), (2_400_000, "2.4M")],
)
def test_format_count(count: int | None, expected: str) -> None:
    assert format_count(count) == expected


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(seconds=30), "Just now"),
        (timedelta(minutes=5), "5m ago"),
        (timedelta(hours=3), "3h ago"),
        (timedelta(days=2), "2d ago"),
    ],
)
def test_format_time_ago_recent(delta: timedelta, expected: str) -> None:
    assert format_time_ago(NOW - delta, now=NOW) == expected


def test_format_time_ago_old_dates_are_absolute() -> None:
    assert format_time_ago(datetime(2024, 1, 5, tzinfo=timezone.utc), now=NOW) == "Jan 5, 2024"


def test_parse_iso_accepts_z_and_naive() -> None:
    assert parse_iso("2024-01-01T10:00:00Z") == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)
    assert parse_iso("2024-01-01T10:00:00").tzinfo is timezone.utc
    assert parse_iso(utc_now_iso()).tzinfo is not None


def test_detect_mime_type(sample_png_binary: bytes) -> None:
    assert detect_mime_type(sample_png_binary) == "image/png"
    assert detect_mime_type(b"\xff\xd8\xff\xe0rest") == "image/jpeg"

    with pytest.raises(ValueError):
        detect_mime_type(b"plain text")


def test_extension_for() -> None:
    assert extension_for("image/jpeg") == "jpg"
    assert extension_for("application/zip") == "bin"


def test_validate_input_sanitizes_errors() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_input(PhotoDraft, {"title": "x" * 201})

    assert exc.value.details["errors"] == [{"field": "title", "message": "This value is too long"}]


def test_validate_input_strips_whitespace() -> None:
    assert validate_input(PhotoDraft, {"title": "  Sunset  "}).title == "Sunset"


@pytest.mark.parametrize(
    "offset, limit, expected",
    [(0, 2, [0, 1]), (3, 10, [3, 4]), (2, None, [2, 3, 4]), (9, 5, [])],
)
def test_offset_window(offset: int, limit: int | None, expected: list[int]) -> None:
    rows = [{"n": n} for n in range(5)]

    assert [row["n"] for row in OffsetPagination(offset=offset, limit=limit).apply(rows)] == expected


@pytest.mark.parametrize("offset, limit", [(-1, 10), (0, 0), (0, 101)])
def test_offset_window_rejects_bad_ranges(offset: int, limit: int) -> None:
    with pytest.raises(ValidationError) as exc:
        OffsetPagination(offset=offset, limit=limit).ensure_valid()

    assert exc.value.error_code == "INVALID_RANGE"
