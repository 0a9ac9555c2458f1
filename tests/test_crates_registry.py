"""Tests for the crates.io registry client."""

from unittest.mock import patch

import pytest
import requests
import semantic_version

from common.http_client import HttpClientError
from constants import Constants
from errors import NoMatchingVersion, RegistryError
from registry.crates import CratesRegistry
from versioning.parser import parse_requirement


def _payload(versions, max_version=None, max_stable_version=None):
    return {
        "crate": {
            "id": "tool",
            "max_version": max_version,
            "max_stable_version": max_stable_version,
        },
        "versions": [
            {"num": num, "yanked": yanked} for num, yanked in versions
        ],
    }


class TestCrateUrl:
    """URL construction."""

    def test_default_base(self):
        assert CratesRegistry().crate_url("ripgrep") == "https://crates.io/api/v1/crates/ripgrep"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv(Constants.ENV_REGISTRY_URL, "http://mirror.local/")
        assert CratesRegistry().crate_url("bat") == "http://mirror.local/api/v1/crates/bat"

    def test_explicit_base_wins(self, monkeypatch):
        monkeypatch.setenv(Constants.ENV_REGISTRY_URL, "http://mirror.local")
        registry = CratesRegistry("http://other.local")
        assert registry.crate_url("bat").startswith("http://other.local/")

    def test_name_is_quoted(self):
        assert CratesRegistry().crate_url("a/../b").endswith("/a%2F..%2Fb")


class TestLatestVersion:
    """latest_version."""

    @patch("registry.crates.get_json")
    def test_prefers_max_stable(self, mock_get_json):
        mock_get_json.return_value = (200, {}, _payload(
            [("2.0.0-rc.1", False), ("1.4.0", False)],
            max_version="2.0.0-rc.1", max_stable_version="1.4.0",
        ))
        assert CratesRegistry().latest_version("tool") == semantic_version.Version("1.4.0")

    @patch("registry.crates.get_json")
    def test_falls_back_to_max_version(self, mock_get_json):
        mock_get_json.return_value = (200, {}, _payload(
            [("0.1.0-alpha.1", False)], max_version="0.1.0-alpha.1",
        ))
        assert str(CratesRegistry().latest_version("tool")) == "0.1.0-alpha.1"

    @patch("registry.crates.get_json")
    def test_falls_back_to_version_list(self, mock_get_json):
        payload = _payload([("1.0.0", False), ("1.2.0", True), ("1.1.0", False), ("2.0.0-beta", False)])
        del payload["crate"]
        mock_get_json.return_value = (200, {}, payload)
        assert str(CratesRegistry().latest_version("tool")) == "1.1.0"

    @patch("registry.crates.get_json")
    def test_no_versions_is_registry_error(self, mock_get_json):
        mock_get_json.return_value = (200, {}, {"versions": []})
        with pytest.raises(RegistryError):
            CratesRegistry().latest_version("tool")

    @patch("registry.crates.get_json")
    def test_sends_json_accept_header(self, mock_get_json):
        mock_get_json.return_value = (200, {}, _payload([], max_stable_version="1.0.0"))
        CratesRegistry().latest_version("tool")
        args, kwargs = mock_get_json.call_args
        assert args[0] == "https://crates.io/api/v1/crates/tool"
        assert kwargs["headers"]["Accept"] == "application/json"


class TestHighestMatching:
    """highest_matching_version."""

    @patch("registry.crates.get_json")
    def test_picks_highest_non_yanked_match(self, mock_get_json):
        mock_get_json.return_value = (200, {}, _payload([
            ("1.0.0", False), ("1.4.2", False), ("1.5.0", True), ("2.0.0", False), ("garbage", False),
        ]))
        version = CratesRegistry().highest_matching_version("tool", parse_requirement("^1"))
        assert version == semantic_version.Version("1.4.2")

    @patch("registry.crates.get_json")
    def test_skips_prereleases_for_plain_requirement(self, mock_get_json):
        mock_get_json.return_value = (200, {}, _payload([
            ("1.5.0", False), ("1.6.0-beta.1", False), ("2.0.0-rc.1", False),
        ]))
        version = CratesRegistry().highest_matching_version("tool", parse_requirement(">=1.0"))
        assert version == semantic_version.Version("1.5.0")

    @patch("registry.crates.get_json")
    def test_zero_x_only_crate_matches_bare_zero(self, mock_get_json):
        mock_get_json.return_value = (200, {}, _payload([
            ("0.0.5", False), ("0.3.1", False), ("0.9.0", False),
        ]))
        version = CratesRegistry().highest_matching_version("tool", parse_requirement("0"))
        assert version == semantic_version.Version("0.9.0")

    @patch("registry.crates.get_json")
    def test_no_match_raises(self, mock_get_json):
        mock_get_json.return_value = (200, {}, _payload([("1.0.0", False)]))
        with pytest.raises(NoMatchingVersion) as exc_info:
            CratesRegistry().highest_matching_version("tool", parse_requirement("^3"))
        assert exc_info.value.crate == "tool"
        assert exc_info.value.requirement == "^3"
        assert "tool" in str(exc_info.value) and "^3" in str(exc_info.value)


class TestFailures:
    """Transport and payload errors become RegistryError."""

    @patch("registry.crates.get_json")
    def test_not_found(self, mock_get_json):
        mock_get_json.return_value = (404, {}, None)
        with pytest.raises(RegistryError, match="not found"):
            CratesRegistry().latest_version("nope")

    @patch("registry.crates.get_json")
    def test_server_error(self, mock_get_json):
        mock_get_json.return_value = (503, {}, None)
        with pytest.raises(RegistryError, match="503"):
            CratesRegistry().latest_version("tool")

    @patch("registry.crates.get_json")
    def test_malformed_json(self, mock_get_json):
        mock_get_json.return_value = (200, {}, None)
        with pytest.raises(RegistryError, match="malformed"):
            CratesRegistry().latest_version("tool")

    @patch("registry.crates.get_json")
    def test_transport_failure_keeps_cause(self, mock_get_json):
        cause = HttpClientError("GET failed")
        mock_get_json.side_effect = cause
        with pytest.raises(RegistryError) as exc_info:
            CratesRegistry().highest_matching_version("tool", parse_requirement("^1"))
        assert exc_info.value.__cause__ is cause
        assert exc_info.value.crate == "tool"


class TestHttpClientIntegration:
    """End-to-end through common.http_client with requests mocked."""

    @patch("common.http_client.time.sleep")
    @patch("common.http_client.requests.get")
    def test_retries_then_wraps_connection_error(self, mock_get, mock_sleep):
        mock_get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(RegistryError) as exc_info:
            CratesRegistry().latest_version("tool")
        assert mock_get.call_count == Constants.HTTP_RETRY_MAX
        http_error = exc_info.value.__cause__
        assert isinstance(http_error, HttpClientError)
        assert isinstance(http_error.__cause__, requests.ConnectionError)

    @patch("common.http_client.requests.get")
    def test_user_agent_is_sent(self, mock_get):
        response = mock_get.return_value
        response.status_code = 200
        response.headers = {}
        response.text = '{"crate": {"max_stable_version": "0.2.0"}}'
        assert str(CratesRegistry().latest_version("tool")) == "0.2.0"
        assert mock_get.call_args[1]["headers"]["User-Agent"] == Constants.USER_AGENT
        assert mock_get.call_args[1]["timeout"] == Constants.REQUEST_TIMEOUT
