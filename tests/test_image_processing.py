"""Tests for postsync.core.image_processing."""

import numpy as np
import pytest
from PIL import Image

from postsync.core.image_processing import (
    AdjustmentEngine,
    FilterOp,
    apply_filter_chain,
    apply_transform,
    build_filter_chain,
    filter_string,
    render_adjusted,
)
from postsync.schemas import AdjustmentState, FilterPreset


# ---------------------------------------------------------------------------
# Filter chain
# ---------------------------------------------------------------------------


class TestFilterChain:
    """Validate translation of adjustment state into CSS filter functions."""

    def test_default_chain_is_neutral(self) -> None:
        chain = build_filter_chain(AdjustmentState())
        assert filter_string(chain) == (
            "brightness(100%) contrast(100%) saturate(100%)"
        )

    def test_preset_is_appended_after_adjustments(self) -> None:
        state = AdjustmentState(brightness=20, filter_preset=FilterPreset.VIVID)
        chain = build_filter_chain(state)
        assert filter_string(chain) == (
            "brightness(120%) contrast(100%) saturate(100%) "
            "saturate(150%) contrast(110%)"
        )

    def test_cool_preset_rotates_hue(self) -> None:
        chain = build_filter_chain(AdjustmentState(filter_preset="cool"))
        assert chain[-2] == FilterOp("hue-rotate", 180.0)
        assert "hue-rotate(180deg)" in filter_string(chain)

    def test_negative_adjustment_ratios(self) -> None:
        chain = build_filter_chain(
            AdjustmentState(brightness=-50, contrast=-100, saturation=-25)
        )
        assert [op.amount for op in chain] == [0.5, 0.0, 0.75]


class TestApplyFilterChain:
    """Validate pixel effects of the filter chain."""

    def test_neutral_chain_keeps_pixels(self, rgb_image: Image.Image) -> None:
        result = apply_filter_chain(rgb_image, build_filter_chain(AdjustmentState()))
        assert result.mode == "RGBA"
        np.testing.assert_array_equal(
            np.array(result)[:, :, :3], np.array(rgb_image)
        )

    def test_brightness_raises_mean(self, rgb_image: Image.Image) -> None:
        chain = build_filter_chain(AdjustmentState(brightness=50))
        result = apply_filter_chain(rgb_image, chain)
        assert np.array(result)[:, :, :3].mean() > np.array(rgb_image).mean()

    def test_zero_contrast_is_flat_grey(self, rgb_image: Image.Image) -> None:
        chain = build_filter_chain(AdjustmentState(contrast=-100))
        arr = np.array(apply_filter_chain(rgb_image, chain))[:, :, :3]
        assert arr.min() == arr.max()

    def test_grayscale_equalises_channels(self, rgb_image: Image.Image) -> None:
        chain = build_filter_chain(AdjustmentState(filter_preset="bw"))
        arr = np.array(apply_filter_chain(rgb_image, chain)).astype(int)
        assert np.abs(arr[:, :, 0] - arr[:, :, 1]).max() <= 1
        assert np.abs(arr[:, :, 1] - arr[:, :, 2]).max() <= 1

    def test_vintage_changes_pixels(self, rgb_image: Image.Image) -> None:
        chain = build_filter_chain(AdjustmentState(filter_preset="vintage"))
        result = apply_filter_chain(rgb_image, chain)
        assert not np.array_equal(np.array(result)[:, :, :3], np.array(rgb_image))

    def test_alpha_is_preserved(self, rgba_image: Image.Image) -> None:
        image = rgba_image.copy()
        image.putalpha(100)
        chain = build_filter_chain(AdjustmentState(saturation=80, filter_preset="cool"))
        result = apply_filter_chain(image, chain)
        assert np.all(np.array(result)[:, :, 3] == 100)

    def test_unknown_function_raises(self, rgb_image: Image.Image) -> None:
        with pytest.raises(ValueError, match="blur"):
            apply_filter_chain(rgb_image, [FilterOp("blur", 2.0)])


# ---------------------------------------------------------------------------
# Geometric transform
# ---------------------------------------------------------------------------


class TestApplyTransform:
    """Validate centre-anchored rotation and zoom."""

    def test_identity_returns_copy(self, rgba_image: Image.Image) -> None:
        result = apply_transform(rgba_image, 0, 1.0)
        assert result is not rgba_image
        np.testing.assert_array_equal(np.array(result), np.array(rgba_image))

    def test_half_turn_swaps_sides(self, split_image: Image.Image) -> None:
        result = np.array(apply_transform(split_image.convert("RGBA"), 180, 1.0))
        left = result[40, 10]
        right = result[40, 90]
        assert left[2] > 200 and left[0] < 50
        assert right[0] > 200 and right[2] < 50

    def test_quarter_turn_keeps_canvas_size(self, rgba_image: Image.Image) -> None:
        result = apply_transform(rgba_image, 90, 1.0)
        assert result.size == rgba_image.size
        # A 100x80 image turned upright covers only the central 80 columns.
        alpha = np.array(result)[:, :, 3]
        assert alpha[40, 2] == 0
        assert alpha[40, 50] == 255

    def test_zoom_out_leaves_transparent_border(
        self, rgba_image: Image.Image
    ) -> None:
        alpha = np.array(apply_transform(rgba_image, 0, 0.5))[:, :, 3]
        assert alpha[0, 0] == 0
        assert alpha[40, 50] == 255

    def test_quarter_turn_is_clockwise(self) -> None:
        arr = np.zeros((80, 100, 4), dtype=np.uint8)
        arr[:40, :, 0] = 255
        arr[40:, :, 2] = 255
        arr[:, :, 3] = 255
        result = np.array(apply_transform(Image.fromarray(arr, mode="RGBA"), 90, 1.0))
        # The top edge ends up on the right.
        right = result[40, 85]
        left = result[40, 15]
        assert right[0] > 200 and right[2] < 50
        assert left[2] > 200 and left[0] < 50

    def test_zoom_in_fills_canvas(self, rgba_image: Image.Image) -> None:
        alpha = np.array(apply_transform(rgba_image, 0, 2.0))[:, :, 3]
        assert np.all(alpha == 255)


class TestRenderAdjusted:
    def test_output_matches_source_size(self, rgb_image: Image.Image) -> None:
        state = AdjustmentState(rotation=270, zoom=1.5, filter_preset="vivid")
        result = render_adjusted(rgb_image, state)
        assert result.size == rgb_image.size
        assert result.mode == "RGBA"


# ---------------------------------------------------------------------------
# AdjustmentEngine
# ---------------------------------------------------------------------------


class TestAdjustmentEngine:
    """Validate engine state handling and render notifications."""

    def test_render_without_source_is_noop(self) -> None:
        engine = AdjustmentEngine()
        calls = []
        engine.subscribe(calls.append)
        assert engine.render() is None
        assert engine.set_adjustment("brightness", 30) is None
        assert engine.is_ready() is False
        assert calls == []
        # State still updates before a source arrives.
        assert engine.state.brightness == 30

    def test_load_renders_and_notifies(self, rgb_image: Image.Image) -> None:
        engine = AdjustmentEngine()
        calls = []
        engine.subscribe(calls.append)
        rendered = engine.load(rgb_image)
        assert engine.is_ready() is True
        assert engine.source.mode == "RGBA"
        assert calls == [rendered]

    def test_every_mutation_notifies(self, rgb_image: Image.Image) -> None:
        engine = AdjustmentEngine()
        engine.load(rgb_image)
        calls = []
        engine.subscribe(calls.append)
        engine.set_adjustment("contrast", 10)
        engine.apply_filter_preset("bw")
        engine.rotate90()
        engine.zoom_in()
        engine.reset()
        assert len(calls) == 5
        assert engine.state.is_default()

    def test_set_adjustment_clamps(self, rgb_image: Image.Image) -> None:
        engine = AdjustmentEngine()
        engine.load(rgb_image)
        engine.set_adjustment("saturation", 400)
        assert engine.state.saturation == 100

    def test_non_finite_values_never_raise(self, rgb_image: Image.Image) -> None:
        engine = AdjustmentEngine()
        engine.load(rgb_image)
        engine.set_adjustment("rotation", float("nan"))
        engine.set_adjustment("rotation", float("inf"))
        engine.set_adjustment("brightness", 10**400)
        assert engine.state.is_default()
        assert engine.rendered.size == rgb_image.size

    def test_unknown_field_raises(self) -> None:
        engine = AdjustmentEngine()
        with pytest.raises(ValueError, match="Unknown adjustment"):
            engine.set_adjustment("sharpness", 1)

    def test_four_rotations_return_to_zero(self) -> None:
        engine = AdjustmentEngine()
        seen = []
        for _ in range(4):
            engine.rotate90()
            seen.append(engine.state.rotation)
        assert seen == [90, 180, 270, 0]

    def test_zoom_in_steps_and_caps(self) -> None:
        engine = AdjustmentEngine()
        engine.zoom_in()
        assert engine.state.zoom == 1.1
        for _ in range(30):
            engine.zoom_in()
        assert engine.state.zoom == 3.0

    def test_zoom_out_floors(self) -> None:
        engine = AdjustmentEngine()
        engine.zoom_out()
        assert engine.state.zoom == 0.9
        for _ in range(30):
            engine.zoom_out()
        assert engine.state.zoom == 0.5

    def test_unknown_preset_resets_to_none(self) -> None:
        engine = AdjustmentEngine()
        engine.apply_filter_preset("vivid")
        engine.apply_filter_preset("neon")
        assert engine.state.filter_preset is FilterPreset.NONE

    def test_new_load_keeps_state(
        self, rgb_image: Image.Image, split_image: Image.Image
    ) -> None:
        engine = AdjustmentEngine()
        engine.load(rgb_image)
        engine.rotate90()
        engine.load(split_image)
        assert engine.state.rotation == 90
        assert engine.rendered.size == split_image.size
