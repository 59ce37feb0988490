import pytest

from core.affine import AffineTransform2D
from core.bounds import (
    TranslationBounds,
    clamp_translation,
    initial_centering_offset,
    is_degenerate,
    legal_translation_bounds,
)
from core.geometry import Point, Size


VIEWPORT = Size(400.0, 800.0)
CONTENT = Size(400.0, 400.0)


def test_initial_centering_offset():
    assert initial_centering_offset(CONTENT, VIEWPORT) == Point(0.0, 200.0)


def test_fitting_content_is_pinned_at_natural_scale():
    bounds = legal_translation_bounds(CONTENT, VIEWPORT, 1.0)
    assert bounds == TranslationBounds(0.0, 0.0, 0.0, 0.0)
    assert bounds.is_pinned_x and bounds.is_pinned_y


def test_overflowing_axis_is_free_and_exact_fit_is_pinned():
    bounds = legal_translation_bounds(CONTENT, VIEWPORT, 2.0)
    assert (bounds.min_x, bounds.max_x) == (-400.0, 0.0)
    assert not bounds.is_pinned_x
    assert bounds.min_y == bounds.max_y == -200.0


def test_bounds_without_centering_offset():
    at_one = legal_translation_bounds(CONTENT, VIEWPORT, 1.0, centering=False)
    assert at_one == TranslationBounds(0.0, 0.0, 200.0, 200.0)

    at_two = legal_translation_bounds(CONTENT, VIEWPORT, 2.0, centering=False)
    assert at_two == TranslationBounds(-400.0, 0.0, 0.0, 0.0)


def test_axes_are_independent():
    wide = Size(400.0, 100.0)
    bounds = legal_translation_bounds(wide, VIEWPORT, 3.0)
    assert (bounds.min_x, bounds.max_x) == (-800.0, 0.0)
    # 300px tall inside 800px: centered, offset of 350 folded in
    assert bounds.min_y == bounds.max_y == pytest.approx(-100.0)


def test_clamp_snaps_pinned_axis_and_limits_free_axis():
    bounds = TranslationBounds(-400.0, 0.0, -200.0, -200.0)
    assert bounds.clamp(50.0, 13.0) == (0.0, -200.0)
    assert bounds.clamp(-999.0, -500.0) == (-400.0, -200.0)
    assert bounds.clamp(-123.0, -200.0) == (-123.0, -200.0)


def test_contains():
    bounds = TranslationBounds(-400.0, 0.0, -200.0, -200.0)
    assert bounds.contains(-100.0, -200.0)
    assert not bounds.contains(10.0, -200.0)
    assert not bounds.contains(-100.0, -190.0)


def test_zero_content_is_degenerate():
    assert is_degenerate(None)
    assert is_degenerate(Size(0.0, 0.0))
    assert is_degenerate(Size(10.0, 0.0))
    assert not is_degenerate(CONTENT)

    bounds = legal_translation_bounds(Size(), VIEWPORT, 1.0)
    assert bounds == TranslationBounds(0.0, 0.0, 0.0, 0.0)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        Size(-1.0, 10.0)
    with pytest.raises(ValueError):
        Size(float("nan"), 10.0)


def test_clamp_translation_keeps_scale_and_clamps_offsets():
    bounds = legal_translation_bounds(CONTENT, VIEWPORT, 2.0)
    clamped = clamp_translation(AffineTransform2D(a=2.0, d=2.0, tx=120.0, ty=-640.0), bounds)
    assert clamped.as_tuple() == (2.0, 0.0, 0.0, 2.0, 0.0, -200.0)
    assert clamp_translation(clamped, bounds) == clamped
