"""Tests for base64 image decoding in its strict and skip-invalid modes."""

import base64
import io

import pytest
from PIL import Image

from conftest import make_oversized_png_base64, make_png_base64
from wordchef.errors import DecodeError
from wordchef.images import decode_image_strict, decode_images_skip_invalid


def test_strict_decode_returns_loaded_bitmap(png_base64):
    result = decode_image_strict(png_base64, "cat")

    assert result.word == "cat"
    assert result.data == base64.b64decode(png_base64)
    assert result.image.format == "PNG"
    assert result.size == (4, 4)


@pytest.mark.parametrize("payload", ["", "not base64!", "aGVsbG8="])
def test_strict_decode_rejects_bad_payloads(payload):
    with pytest.raises(DecodeError):
        decode_image_strict(payload, "cat")


def test_strict_decode_rejects_truncated_image():
    buffer = io.BytesIO()
    Image.new("RGB", (64, 64), (10, 20, 30)).save(buffer, format="PNG")
    truncated = base64.b64encode(buffer.getvalue()[:60]).decode("ascii")

    with pytest.raises(DecodeError):
        decode_image_strict(truncated, "cat")


def test_skip_invalid_returns_exact_valid_subset(png_base64):
    images = {
        "a": png_base64,
        "b": "###",
        "c": make_png_base64(size=(2, 3)),
        "d": "",
    }

    decoded = decode_images_skip_invalid(images)

    assert set(decoded) == {"a", "c"}
    assert decoded["c"].size == (2, 3)


def test_skip_invalid_logs_failures(png_base64, caplog):
    with caplog.at_level("WARNING", logger="wordchef.images"):
        decode_images_skip_invalid({"a": png_base64, "b": "###"})

    assert "Failed to decode image for word: b" in caplog.text


def test_skip_invalid_filters_to_requested(png_base64):
    decoded = decode_images_skip_invalid({"a": png_base64, "z": png_base64}, requested=["a", "b"])

    assert set(decoded) == {"a"}


def test_save_writes_png(tmp_path, png_base64):
    result = decode_image_strict(png_base64, "hot dog")

    path = result.save(str(tmp_path / "out"))

    assert path.endswith("hot_dog.png")
    with Image.open(path) as saved:
        assert saved.size == (4, 4)


def test_strict_decode_rejects_decompression_bomb():
    with pytest.raises(DecodeError):
        decode_image_strict(make_oversized_png_base64(), "dog")


def test_skip_invalid_survives_decompression_bomb(png_base64):
    decoded = decode_images_skip_invalid({"cat": png_base64, "dog": make_oversized_png_base64()})

    assert set(decoded) == {"cat"}


def _jpeg_base64(mode: str) -> str:
    buffer = io.BytesIO()
    Image.new(mode, (4, 4)).save(buffer, format="JPEG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def test_save_converts_cmyk_to_rgb(tmp_path):
    result = decode_image_strict(_jpeg_base64("CMYK"), "cat")
    assert result.image.mode == "CMYK"

    path = result.save(str(tmp_path))

    with Image.open(path) as saved:
        assert saved.format == "PNG"
        assert saved.mode == "RGB"
        assert saved.size == (4, 4)
