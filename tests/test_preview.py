"""Tests for the preview module.

This module tests the preview/image, preview/display and preview/export
functionality including:
- The in-memory Image render target
- Tone mapping functions (Reinhard, exposure)
- Gamma correction
- PNG export
- RMSE computation

Note: Tests avoid displaying actual windows by not calling show_preview
in automated tests. The processing functions are tested directly.
"""

import numpy as np
import pytest
from PIL import Image as PILImage


class TestImage:
    """Test the Image render target."""

    def test_new_image_is_black(self):
        from src.whitted.preview.image import Image

        image = Image(4, 3)
        assert image.width == 4
        assert image.height == 3
        assert image.to_numpy().shape == (3, 4, 3)
        assert np.all(image.to_numpy() == 0.0)

    def test_set_and_get_pixel(self):
        """Row index is y, column index is x."""
        from src.whitted.preview.image import Image

        image = Image(4, 3)
        image.set_pixel(3, 1, (0.25, 0.5, 2.0))

        assert image.get_pixel(3, 1) == (0.25, 0.5, 2.0)
        assert np.allclose(image.to_numpy()[1, 3], [0.25, 0.5, 2.0])

    def test_out_of_bounds(self):
        from src.whitted.preview.image import Image

        image = Image(4, 3)
        with pytest.raises(IndexError):
            image.set_pixel(4, 0, (1, 1, 1))
        with pytest.raises(IndexError):
            image.get_pixel(0, -1)

    def test_invalid_dimensions(self):
        from src.whitted.preview.image import Image

        with pytest.raises(ValueError):
            Image(0, 10)

    def test_fill_checks_shape(self):
        from src.whitted.preview.image import Image

        image = Image(4, 3)
        image.fill(np.ones((3, 4, 3), dtype=np.float32))
        assert image.get_pixel(2, 2) == (1.0, 1.0, 1.0)

        with pytest.raises(ValueError, match="shape"):
            image.fill(np.ones((4, 3, 3), dtype=np.float32))

    def test_to_numpy_returns_copy(self):
        from src.whitted.preview.image import Image

        image = Image(2, 2)
        pixels = image.to_numpy()
        pixels[...] = 1.0
        assert image.get_pixel(0, 0) == (0.0, 0.0, 0.0)


class TestToneMapping:
    """Test Reinhard and exposure tone mapping."""

    def test_reinhard_formula(self):
        """Test Reinhard formula: L / (1 + L)."""
        from src.whitted.preview.display import tone_map_reinhard

        for val in [0.0, 0.5, 1.0, 2.0, 10.0]:
            image = np.full((2, 2, 3), val, dtype=np.float32)
            assert np.allclose(tone_map_reinhard(image), val / (1.0 + val), atol=1e-6)

    def test_reinhard_clamps_negative_input(self):
        from src.whitted.preview.display import tone_map_reinhard

        image = np.full((2, 2, 3), -1.0, dtype=np.float32)
        assert np.all(tone_map_reinhard(image) == 0.0)

    def test_exposure_formula(self):
        """Test exposure formula: 1 - exp(-L * exposure)."""
        from src.whitted.preview.display import tone_map_exposure

        image = np.full((2, 2, 3), 1.0, dtype=np.float32)
        assert np.allclose(tone_map_exposure(image, 2.0), 1.0 - np.exp(-2.0), atol=1e-6)

    def test_unknown_method(self):
        from src.whitted.preview.display import process_image_for_display

        with pytest.raises(ValueError, match="Unknown tone mapping"):
            process_image_for_display(np.zeros((2, 2, 3), dtype=np.float32), tone_map="aces")

    def test_non_finite_values_become_black(self):
        from src.whitted.preview.display import process_image_for_display

        image = np.array([[[np.nan, np.inf, 0.5]]], dtype=np.float32)
        result = process_image_for_display(image)
        assert np.allclose(result, [[[0.0, 0.0, 0.5]]])


class TestGamma:
    """Test gamma correction."""

    def test_gamma_one_only_clamps(self):
        from src.whitted.preview.display import apply_gamma

        image = np.array([[[-0.5, 0.25, 3.0]]], dtype=np.float32)
        assert np.allclose(apply_gamma(image, 1.0), [[[0.0, 0.25, 1.0]]])

    def test_gamma_brightens_midtones(self):
        from src.whitted.preview.display import apply_gamma

        image = np.full((2, 2, 3), 0.25, dtype=np.float32)
        assert np.allclose(apply_gamma(image, 2.0), 0.5, atol=1e-6)

    def test_gamma_must_be_positive(self):
        from src.whitted.preview.display import apply_gamma

        with pytest.raises(ValueError):
            apply_gamma(np.zeros((2, 2, 3), dtype=np.float32), 0.0)


class TestExport:
    """Test 8-bit conversion and PNG export."""

    def test_image_to_uint8_clamps_and_rounds(self):
        from src.whitted.preview.export import image_to_uint8

        image = np.array([[[0.0, 0.5, 1.0], [-1.0, 2.0, 0.1]]], dtype=np.float32)
        result = image_to_uint8(image)

        assert result.dtype == np.uint8
        assert result.tolist() == [[[0, 128, 255], [0, 255, 26]]]

    def test_save_png_round_trip(self, tmp_path):
        """Saved PNG has the image's size, with row 0 at the top."""
        from src.whitted.preview.export import save_png
        from src.whitted.preview.image import Image

        image = Image(5, 3)
        image.set_pixel(0, 0, (1.0, 0.0, 0.0))
        image.set_pixel(4, 2, (0.0, 0.0, 1.0))
        path = tmp_path / "out.png"
        save_png(image, path)

        with PILImage.open(path) as loaded:
            assert loaded.size == (5, 3)
            assert loaded.mode == "RGB"
            assert loaded.getpixel((0, 0)) == (255, 0, 0)
            assert loaded.getpixel((4, 2)) == (0, 0, 255)
            assert loaded.getpixel((2, 1)) == (0, 0, 0)

    def test_save_png_accepts_arrays(self, tmp_path):
        from src.whitted.preview.export import save_png

        path = tmp_path / "array.png"
        save_png(np.full((2, 3, 3), 0.5, dtype=np.float32), path, tone_map="reinhard")

        with PILImage.open(path) as loaded:
            assert loaded.size == (3, 2)
            # 0.5 / 1.5 = 1/3
            assert loaded.getpixel((1, 1)) == (85, 85, 85)


class TestComputeRmse:
    """Test RMSE computation."""

    def test_identical_images(self):
        from src.whitted.preview.export import compute_rmse

        image = np.random.default_rng(0).random((4, 4, 3)).astype(np.float32)
        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        from src.whitted.preview.export import compute_rmse

        a = np.zeros((2, 2, 3), dtype=np.float32)
        b = np.full((2, 2, 3), 0.5, dtype=np.float32)
        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_shape_mismatch(self):
        from src.whitted.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))
