"""Tests for the conversion request model."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from imgcoon.models import AnchorPoint, ConversionRequest, ThumbnailMode


def _request(**kwargs) -> ConversionRequest:
    defaults = {
        "source_path": Path("/tmp/source.png"),
        "source_mime": "image/png",
        "destination_path": Path("/tmp/thumb.webp"),
    }
    defaults.update(kwargs)
    return ConversionRequest(**defaults)


class TestConversionRequest:
    """Tests for ConversionRequest."""

    def test_defaults(self) -> None:
        """Test default request values."""
        request = _request()
        assert request.destination_mime == "image/webp"
        assert request.width == 600
        assert request.height == 600
        assert request.quality == 75
        assert request.mode == ThumbnailMode.CROP
        assert request.anchor == AnchorPoint.CENTER
        assert request.generator == "auto"
        assert request.is_auto

    def test_explicit_generator_is_not_auto(self) -> None:
        """Test that a named generator disables auto dispatch."""
        assert not _request(generator="pdf").is_auto

    @pytest.mark.parametrize(("given", "expected"), [(150, 100), (-5, 0), (0, 0), (100, 100), (42, 42)])
    def test_quality_is_clamped(self, given: int, expected: int) -> None:
        """Test quality clamping into 0-100."""
        assert _request(quality=given).quality == expected

    @pytest.mark.parametrize("value", [None, "high", [75]])
    def test_non_numeric_quality_rejected(self, value) -> None:
        """Test that a non-numeric quality is a validation error."""
        with pytest.raises(ValidationError):
            _request(quality=value)

    @pytest.mark.parametrize("field", ["width", "height"])
    @pytest.mark.parametrize("value", [0, -10])
    def test_dimensions_must_be_positive(self, field: str, value: int) -> None:
        """Test that zero and negative sizes are rejected."""
        with pytest.raises(ValidationError):
            _request(**{field: value})

    def test_mode_from_string(self) -> None:
        """Test mode parsing from its string value."""
        assert _request(mode="canvas").mode == ThumbnailMode.CANVAS

    def test_invalid_mode_rejected(self) -> None:
        """Test that an unknown mode is rejected."""
        with pytest.raises(ValidationError):
            _request(mode="stretch")

    def test_request_is_frozen(self) -> None:
        """Test that requests cannot be modified."""
        request = _request()
        with pytest.raises(ValidationError):
            request.width = 10


class TestAnchorPoint:
    """Tests for AnchorPoint centering fractions."""

    @pytest.mark.parametrize(
        ("anchor", "centering"),
        [
            (AnchorPoint.CENTER, (0.5, 0.5)),
            (AnchorPoint.TOP, (0.5, 0.0)),
            (AnchorPoint.BOTTOM, (0.5, 1.0)),
            (AnchorPoint.LEFT, (0.0, 0.5)),
            (AnchorPoint.RIGHT, (1.0, 0.5)),
            (AnchorPoint.TOP_LEFT, (0.0, 0.0)),
            (AnchorPoint.BOTTOM_RIGHT, (1.0, 1.0)),
        ],
    )
    def test_centering(self, anchor: AnchorPoint, centering: tuple[float, float]) -> None:
        """Test ImageOps.fit centering for each anchor."""
        assert anchor.centering == centering
