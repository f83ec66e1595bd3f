"""Tests for the wordchef CLI entry point."""

import base64
import io
from unittest.mock import MagicMock, patch

import pytest
import requests
from PIL import Image

from conftest import make_png_base64, make_response, nearest_body
from config import Config
from wordchef import main as cli
from wordchef.credentials import SettingsFileProvider


@pytest.fixture
def cli_config(tmp_path, monkeypatch):
    config = Config(
        base_url="https://wordchef.test",
        settings_path=str(tmp_path / "settings.json"),
        secrets_path=str(tmp_path / "Secrets.plist"),
    )
    monkeypatch.setattr(cli, "get_config", lambda: config)
    return config


@pytest.fixture
def http_session():
    session = MagicMock(spec=requests.Session)
    with patch("wordchef.api.requests.Session", return_value=session):
        yield session


def test_nearest_mode_prints_neighbors_and_saves_images(cli_config, http_session, tmp_path, capsys):
    http_session.request.side_effect = [
        make_response(nearest_body(["cat"], ["kitten", "dog"])),
        make_response({"kitten": make_png_base64(), "dog": "bad"}),
    ]
    out_dir = tmp_path / "images"

    status = cli.main(["cat", "--limit", "2", "--api-key", "k1", "--output-dir", str(out_dir)])

    output = capsys.readouterr().out
    assert status == 0
    assert "kitten" in output and "dog" in output
    assert "1/2 images loaded" in output
    assert (out_dir / "kitten.png").exists()
    assert not (out_dir / "dog.png").exists()
    assert SettingsFileProvider(cli_config.settings_path).get() == "k1"

    headers = http_session.request.call_args_list[0].kwargs["headers"]
    assert headers == {"X-API-Key": "k1"}


def test_server_error_prints_message(cli_config, http_session, capsys):
    http_session.request.return_value = make_response({}, status_code=500)

    status = cli.main(["cat"])

    assert status == 1
    assert "Error: Nearest API server error" in capsys.readouterr().out


def test_embeddings_mode(cli_config, http_session, capsys):
    http_session.request.return_value = make_response(nearest_body(["king", "queen"], ["x"], dim=4))

    status = cli.main(["king queen", "--mode", "embeddings"])

    output = capsys.readouterr().out
    assert status == 0
    assert "king" in output and "queen" in output
    assert "dim=4" in output


def test_image_mode_decode_failure(cli_config, http_session, capsys):
    http_session.request.return_value = make_response({"label": "cat", "image_base64": "???"})

    status = cli.main(["cat", "--mode", "image"])

    assert status == 1
    assert "Error: Invalid image data for 'cat'" in capsys.readouterr().out


def test_image_mode_saves_cmyk_jpeg(cli_config, http_session, tmp_path, capsys):
    buffer = io.BytesIO()
    Image.new("CMYK", (4, 4)).save(buffer, format="JPEG")
    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    http_session.request.return_value = make_response({"label": "cat", "image_base64": payload})

    status = cli.main(["cat", "--mode", "image", "--output-dir", str(tmp_path / "out")])

    assert status == 0
    assert (tmp_path / "out" / "cat.png").exists()
