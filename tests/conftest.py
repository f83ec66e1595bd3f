"""Shared fixtures for the WordChef client tests.

HTTP traffic is faked by handing the client a MagicMock in place of its
requests.Session; images are generated on the fly with Pillow.
"""

import base64
import io
import json
import struct
import zlib
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

from wordchef.api import WordChefClient

BASE_URL = "https://wordchef.test"
API_KEY = "test-key"


def make_png_base64(color=(255, 0, 0), size=(4, 4)) -> str:
    """Return a tiny PNG encoded as base64 text."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def make_oversized_png_base64(width=20000, height=20000) -> str:
    """A tiny PNG whose header claims dimensions past Pillow's bomb limit."""
    buffer = io.BytesIO()
    Image.new("RGB", (1, 1)).save(buffer, format="PNG")
    data = bytearray(buffer.getvalue())
    # IHDR: width/height at 16:24, crc over type+data at 12:29, crc at 29:33
    data[16:24] = struct.pack(">II", width, height)
    data[29:33] = struct.pack(">I", zlib.crc32(bytes(data[12:29])) & 0xFFFFFFFF)
    return base64.b64encode(bytes(data)).decode("ascii")


def make_response(body=None, status_code=200, raw=None):
    """Build a fake requests.Response carrying a JSON (or raw) body."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    if raw is not None:
        response.content = raw
    else:
        response.content = json.dumps(body).encode("utf-8")
    return response


def nearest_body(words, neighbors, dim=3):
    """Build a nearest.php response body echoing ``words``."""
    return {
        "input": {
            "words": list(words),
            "embeddings": [[float(i)] * dim for i, _ in enumerate(words)],
            "average_embedding": [0.5] * dim,
        },
        "nearest": [
            {"word": w, "distance": 0.1 * (i + 1), "embedding": [0.25] * dim}
            for i, w in enumerate(neighbors)
        ],
    }


@pytest.fixture
def png_base64():
    return make_png_base64()


@pytest.fixture
def http_session():
    """MagicMock standing in for requests.Session."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(http_session):
    return WordChefClient(base_url=BASE_URL, api_key=API_KEY, session=http_session)
