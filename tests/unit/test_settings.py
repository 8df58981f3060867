"""Tests for settings, logging setup and client wiring."""

import json
import logging
from unittest.mock import patch

import httpx
import pytest

from spaces_client.config import Settings, configure_logging, get_settings
from spaces_client.core.errors import ConfigurationError
from spaces_client.core.models import UploadOptions
from spaces_client.factory import create_spaces_client


@pytest.fixture
def spaces_env(monkeypatch):
    monkeypatch.setenv("SPACES_ENDPOINT", "ams3.digitaloceanspaces.com")
    monkeypatch.setenv("SPACES_BUCKET", "assets")
    monkeypatch.setenv("SPACES_ACCESS_KEY_ID", "key-id")
    monkeypatch.setenv("SPACES_SECRET_ACCESS_KEY", "secret")
    monkeypatch.setenv("SPACES_CUSTOM_CDN_HOST", "cdn.example.com")
    monkeypatch.delenv("DIGITALOCEAN_API_TOKEN", raising=False)
    monkeypatch.delenv("SPACES_MOCK_MODE", raising=False)


class TestSettings:

    def test_reads_environment(self, spaces_env):
        settings = Settings(_env_file=None)
        assert settings.spaces_endpoint == "ams3.digitaloceanspaces.com"
        assert settings.spaces_bucket == "assets"
        assert settings.validate_required_fields() == []

    def test_reports_missing_fields(self, monkeypatch):
        for name in (
            "SPACES_BUCKET",
            "SPACES_ACCESS_KEY_ID",
            "SPACES_SECRET_ACCESS_KEY",
            "SPACES_MOCK_MODE",
            "SPACES_ENDPOINT",
        ):
            monkeypatch.delenv(name, raising=False)

        missing = Settings(_env_file=None).validate_required_fields()

        assert missing == ["SPACES_BUCKET"]

    def test_reports_blank_endpoint(self):
        settings = Settings(_env_file=None, spaces_bucket="b", spaces_endpoint="")
        assert settings.validate_required_fields() == ["SPACES_ENDPOINT"]

    def test_access_keys_are_optional(self, monkeypatch):
        monkeypatch.delenv("SPACES_ACCESS_KEY_ID", raising=False)
        monkeypatch.delenv("SPACES_SECRET_ACCESS_KEY", raising=False)
        monkeypatch.delenv("SPACES_MOCK_MODE", raising=False)
        settings = Settings(_env_file=None, spaces_bucket="b")
        assert settings.validate_required_fields() == []

    def test_to_spaces_config(self, spaces_env):
        config = Settings(_env_file=None).to_spaces_config()
        assert config.bucket == "assets"
        assert config.region_name == "ams3"
        assert config.custom_cdn_host == "cdn.example.com"
        assert config.digitalocean_api_token is None

    def test_get_settings_is_cached(self, spaces_env):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestConfigureLogging:

    def test_quiets_sdk_loggers(self):
        configure_logging("DEBUG")
        assert logging.getLogger("botocore").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING


class TestCreateSpacesClient:

    @pytest.fixture
    def settings(self):
        return Settings(
            _env_file=None,
            spaces_endpoint="nyc3.digitaloceanspaces.com",
            spaces_bucket="media",
            spaces_mock_mode=True,
            digitalocean_api_token="do-token",
            backoff_starting_delay=0,
        )

    @pytest.mark.asyncio
    async def test_mock_client_upload_purge_and_list(self, settings, tmp_path):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.method == "GET":
                return httpx.Response(200, json={"endpoints": [
                    {"id": "cdn-media", "origin": "media.nyc3.digitaloceanspaces.com"},
                ]})
            return httpx.Response(204)

        local_file = tmp_path / "song.mp3"
        local_file.write_bytes(b"ID3")

        async with create_spaces_client(
            settings, cdn_transport=httpx.MockTransport(handler)
        ) as client:
            url = await client.upload_file(
                local_file,
                "audio/song.mp3",
                permission="public",
                options=UploadOptions(purge_cache=True, exponential_backoff=True),
            )
            files = await client.list_path_files("audio/", path_only=True)

        assert url == "https://cdn.digitaloceanspaces/audio/song.mp3"
        assert [f.locator for f in files] == ["audio/song.mp3"]
        assert [r.method for r in requests] == ["GET", "DELETE"]
        assert json.loads(requests[1].content) == {"files": ["audio/song.mp3"]}

    @pytest.mark.asyncio
    async def test_without_token_purge_is_configuration_error(self, settings, tmp_path):
        settings.digitalocean_api_token = None
        local_file = tmp_path / "a.txt"
        local_file.write_text("hi")

        client = create_spaces_client(settings)
        with pytest.raises(ConfigurationError):
            await client.upload_file(local_file, "a.txt", options=UploadOptions(purge_cache=True))

    @pytest.mark.asyncio
    async def test_mock_mode_argument_overrides_settings(self, settings, tmp_path):
        settings.spaces_mock_mode = False
        client = create_spaces_client(settings, mock_mode=True)

        assert await client.list_path_objects("") == []

    def test_missing_bucket_is_configuration_error(self, monkeypatch):
        monkeypatch.delenv("SPACES_BUCKET", raising=False)

        with pytest.raises(ConfigurationError, match="SPACES_BUCKET"):
            create_spaces_client(Settings(_env_file=None, spaces_mock_mode=True))

    def test_missing_endpoint_is_configuration_error(self, settings):
        settings.spaces_endpoint = ""

        with pytest.raises(ConfigurationError, match="SPACES_ENDPOINT"):
            create_spaces_client(settings)

    def test_real_store_without_access_keys(self, settings, monkeypatch):
        monkeypatch.delenv("SPACES_ACCESS_KEY_ID", raising=False)
        monkeypatch.delenv("SPACES_SECRET_ACCESS_KEY", raising=False)
        settings.spaces_mock_mode = False
        settings.digitalocean_api_token = None

        with patch("spaces_client.infrastructure.storage.client.boto3") as mock_boto3:
            client = create_spaces_client(settings)

        assert client.bucket == "media"
        _, kwargs = mock_boto3.client.call_args
        assert "aws_access_key_id" not in kwargs
