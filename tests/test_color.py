"""
Tests for the perceptual color resolver and color helpers.

These tests verify hex formatting, determinism, the luminance bisection and
the HSL palette perturbation.
"""

import re

import numpy as np
import pytest

from bloom import color
from bloom.config import ColorConfig

HEX_RE = re.compile(r"^#[0-9a-f]{6}$")


def sample_coordinates(n: int = 40, seed: int = 5) -> np.ndarray:
    """Random coordinates inside the embedding cube."""
    return np.random.default_rng(seed).uniform(-500, 500, size=(n, 3))


class TestConversions:
    """Tests for hex, sRGB, linear and Lab helpers."""

    def test_hex_to_linear_extremes(self) -> None:
        """White and black decode to ones and zeros."""
        assert np.allclose(color.hex_to_linear("#ffffff"), 1.0)
        assert np.allclose(color.hex_to_linear("#000000"), 0.0)

    def test_hex_short_form(self) -> None:
        """#rgb expands to #rrggbb."""
        assert np.allclose(color.hex_to_linear("#fff"), color.hex_to_linear("#ffffff"))

    def test_hex_to_linear_rejects_garbage(self) -> None:
        """Malformed colors raise."""
        with pytest.raises(ValueError):
            color.hex_to_linear("not-a-color")

    def test_is_hex_color(self) -> None:
        """Only hex strings pass."""
        assert color.is_hex_color("#A1b2C3")
        assert not color.is_hex_color("a1b2c3")
        assert not color.is_hex_color("#12345")
        assert not color.is_hex_color(None)

    def test_relative_luminance_white(self) -> None:
        """White has luminance 1, pure green 0.7152."""
        assert color.relative_luminance([1.0, 1.0, 1.0]) == pytest.approx(1.0)
        assert color.relative_luminance([0.0, 1.0, 0.0]) == pytest.approx(0.7152)

    def test_srgb_round_trip_midpoint(self) -> None:
        """Decoding then encoding returns the original channel."""
        assert color.linear_to_srgb(color.srgb_to_linear(0.5)) == pytest.approx(0.5)

    def test_lab_white(self) -> None:
        """L=100 with no chroma is D65 white."""
        assert np.allclose(color.lab_to_linear_rgb((100.0, 0.0, 0.0)), 1.0, atol=1e-3)

    def test_lab_black(self) -> None:
        """L=0 is black."""
        assert np.allclose(color.lab_to_linear_rgb((0.0, 0.0, 0.0)), 0.0, atol=1e-6)


class TestMatchLuminance:
    """Tests for the lightness bisection."""

    @pytest.mark.parametrize("target", [0.08, 0.2, 0.35, 0.62])
    def test_hits_target(self, target: float) -> None:
        """Bisection lands on the target luminance."""
        rgb, lightness = color.match_luminance(0.6, 0.8, target, steps=16)
        assert color.relative_luminance(rgb) == pytest.approx(target, abs=1e-3)
        assert 0.0 <= lightness <= 1.0

    def test_fixed_steps_deterministic(self) -> None:
        """Same inputs, same lightness."""
        a = color.match_luminance(0.1, 0.5, 0.3)
        b = color.match_luminance(0.1, 0.5, 0.3)
        assert a[1] == b[1]


class TestResolveColor:
    """Tests for coordinate -> color."""

    def test_hex_format(self) -> None:
        """Output is a lower-case #rrggbb string."""
        for coord in sample_coordinates(10):
            assert HEX_RE.match(color.resolve_color(coord))

    def test_deterministic(self) -> None:
        """Same coordinate, same color."""
        coord = (210.0, -33.0, 480.0)
        assert color.resolve_color(coord) == color.resolve_color(coord)

    def test_luminance_converges(self) -> None:
        """The quantized color is within 0.01 of its target luminance."""
        for coord in sample_coordinates():
            details = color.resolve_color_details(coord)
            achieved = color.relative_luminance(color.hex_to_linear(details.hex))
            assert abs(achieved - details.target_luminance) < 0.01, (coord, details)

    def test_intermediates_in_range(self) -> None:
        """Gate, target and anchor weights are well formed."""
        config = ColorConfig()
        for coord in sample_coordinates(15, seed=9):
            details = color.resolve_color_details(coord, config)
            assert 0.0 <= details.gate <= 1.0
            assert 0.0 <= details.hue_wave <= 1.0
            lo = config.luminance_min
            assert lo <= details.target_luminance <= lo + config.luminance_span
            assert sum(details.weights) == pytest.approx(1.0)
            assert all(w > 0 for w in details.weights)
            assert len(details.weights) == len(color.HUE_ANCHORS)

    def test_colors_vary_across_space(self) -> None:
        """Different regions of the cube give different colors."""
        colors = {color.resolve_color(coord) for coord in sample_coordinates(20)}
        assert len(colors) > 5

    def test_blend_favours_aligned_anchor(self) -> None:
        """The anchor pointing along the blend direction gets the largest weight."""
        anchor = color.HUE_ANCHORS[4]
        direction = np.array(anchor.lab[1:]) / np.hypot(*anchor.lab[1:])
        _, weights = color.blend_anchors(direction, sharpness=6.0)
        assert int(np.argmax(weights)) == 4


class TestShiftColor:
    """Tests for the HSL palette perturbation."""

    def test_identity(self) -> None:
        """No shift keeps a mid-saturation color."""
        assert color.shift_color("#3366cc", 0.0, 1.0, 1.0) == "#3366cc"

    def test_hue_rotation(self) -> None:
        """Half a turn maps red to cyan."""
        assert color.shift_color("#ff0000", 0.5) == "#00ffff"

    def test_lightness_clamped(self) -> None:
        """Lightness never exceeds 0.95."""
        shifted = color.shift_color("#ffffff", 0.0, 1.0, 2.0)
        rgb = np.array(color.parse_hex(shifted)) / 255.0
        assert rgb.max() < 1.0

    def test_invalid_base_still_hex(self) -> None:
        """An unparseable base still yields a color."""
        assert HEX_RE.match(color.shift_color("oops", 0.1, 1.0, 1.0))


class TestDimColor:
    """Tests for vitality dimming."""

    def test_full_factor_unchanged(self) -> None:
        assert color.dim_color("#3366cc", 1.0) == "#3366cc"

    def test_zero_factor_black(self) -> None:
        assert color.dim_color("#3366cc", 0.0) == "#000000"

    def test_half_factor_darker(self) -> None:
        """Halving intensity halves linear luminance."""
        before = color.relative_luminance(color.hex_to_linear("#3366cc"))
        after = color.relative_luminance(color.hex_to_linear(color.dim_color("#3366cc", 0.5)))
        assert after == pytest.approx(before / 2, abs=0.01)
