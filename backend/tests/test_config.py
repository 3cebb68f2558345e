from pathlib import Path
from unittest.mock import patch

from app.config import (
    DEFAULT_PORT,
    DEFAULT_SEND_TIMEOUT,
    get_cors_origins,
    get_host,
    get_log_level,
    get_port,
    get_send_timeout,
    get_static_dir,
    is_cloud_hosted,
)


def test_port_default_and_from_env() -> None:
    with patch.dict("os.environ", {"PORT": ""}, clear=False):
        assert get_port() == DEFAULT_PORT
    with patch.dict("os.environ", {"PORT": " 8080 "}, clear=False):
        assert get_port() == 8080


def test_port_falls_back_when_not_a_number() -> None:
    with patch.dict("os.environ", {"PORT": "eighty"}, clear=False):
        assert get_port() == DEFAULT_PORT


def test_host_default() -> None:
    with patch.dict("os.environ", {"HOST": ""}, clear=False):
        assert get_host() == "0.0.0.0"


def test_static_dir_requires_existing_directory(tmp_path: Path) -> None:
    with patch.dict("os.environ", {"STATIC_DIR": ""}, clear=False):
        assert get_static_dir() is None
    with patch.dict("os.environ", {"STATIC_DIR": str(tmp_path / "missing")}, clear=False):
        assert get_static_dir() is None
    with patch.dict("os.environ", {"STATIC_DIR": str(tmp_path)}, clear=False):
        assert get_static_dir() == tmp_path


def test_cors_origins_split_on_commas() -> None:
    with patch.dict("os.environ", {"CORS_ALLOW_ORIGINS": ""}, clear=False):
        assert get_cors_origins() == ["*"]
    with patch.dict("os.environ", {"CORS_ALLOW_ORIGINS": "https://a.example, https://b.example,"}, clear=False):
        assert get_cors_origins() == ["https://a.example", "https://b.example"]


def test_log_level_upper_cased() -> None:
    with patch.dict("os.environ", {"LOG_LEVEL": "debug"}, clear=False):
        assert get_log_level() == "DEBUG"


def test_cloud_host_markers() -> None:
    with patch.dict("os.environ", {"RENDER": "", "RAILWAY_ENVIRONMENT": "", "GLITCH": ""}, clear=False):
        assert is_cloud_hosted() is False
    with patch.dict("os.environ", {"RAILWAY_ENVIRONMENT": "production"}, clear=False):
        assert is_cloud_hosted() is True


def test_send_timeout_default_and_from_env() -> None:
    with patch.dict("os.environ", {"SEND_TIMEOUT_SECONDS": ""}, clear=False):
        assert get_send_timeout() == DEFAULT_SEND_TIMEOUT
    with patch.dict("os.environ", {"SEND_TIMEOUT_SECONDS": "0.5"}, clear=False):
        assert get_send_timeout() == 0.5
    for bad in ("soon", "0", "-1"):
        with patch.dict("os.environ", {"SEND_TIMEOUT_SECONDS": bad}, clear=False):
            assert get_send_timeout() == DEFAULT_SEND_TIMEOUT
