"""Tests for the GitHub license API client."""

import json

import pytest
import requests

from alfredlicense import github_api
from alfredlicense.errors import FetchError, LicenseNotFoundError


def make_response(status: int, payload=None, raw: bytes | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = "https://api.github.com/test"
    response._content = raw if raw is not None else json.dumps(payload).encode("utf-8")

    return response


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def install(result):

        def fake(url, headers=None, timeout=None):
            calls.append({"url": url, "headers": headers, "timeout": timeout})

            if isinstance(result, Exception):
                raise result

            return result

        monkeypatch.setattr(github_api.requests, "get", fake)

        return calls

    return install


def test_fetch_license_trims_record(fake_get, mit_license):
    upstream = dict(mit_license, implementation="Create a LICENSE file.", featured=True)
    calls = fake_get(make_response(200, upstream))

    record = github_api.FetchLicense("MIT")

    assert record == mit_license
    assert calls[0]["url"] == "https://api.github.com/licenses/mit"
    assert calls[0]["timeout"] == 5
    assert calls[0]["headers"]["X-GitHub-Api-Version"] == "2022-11-28"
    assert "Authorization" not in calls[0]["headers"]


def test_token_sent_when_configured(fake_get, mit_license):
    calls = fake_get(make_response(200, mit_license))

    github_api.FetchLicense("mit", token="abc123")

    assert calls[0]["headers"]["Authorization"] == "Bearer abc123"


def test_fetch_license_list(fake_get, license_list):
    upstream = [dict(item, node_id="x") for item in license_list]
    fake_get(make_response(200, upstream))

    assert github_api.FetchLicenseList() == license_list


def test_not_found(fake_get):
    fake_get(make_response(404, {"message": "Not Found", "documentation_url": "https://docs.github.com"}))

    with pytest.raises(LicenseNotFoundError) as excinfo:
        github_api.FetchLicense("nope")
    assert excinfo.value.key == "nope"


@pytest.mark.parametrize("status", [403, 500, 502])
def test_error_status(fake_get, status):
    fake_get(make_response(status, {"message": "boom"}))

    with pytest.raises(FetchError) as excinfo:
        github_api.FetchLicense("mit")
    assert not isinstance(excinfo.value, LicenseNotFoundError)


def test_timeout(fake_get):
    fake_get(requests.exceptions.Timeout("slow"))

    with pytest.raises(FetchError, match="Timed out"):
        github_api.FetchLicenseList()


def test_connection_error(fake_get):
    fake_get(requests.exceptions.ConnectionError("offline"))

    with pytest.raises(FetchError):
        github_api.FetchLicense("mit")


def test_invalid_json(fake_get):
    fake_get(make_response(200, raw=b"<html>oops</html>"))

    with pytest.raises(FetchError, match="parse"):
        github_api.FetchLicense("mit")


def test_github_error_document(fake_get):
    fake_get(make_response(200, {"message": "API rate limit exceeded", "documentation_url": "https://docs.github.com"}))

    with pytest.raises(FetchError, match="rate limit"):
        github_api.FetchLicenseList()


def test_missing_body(fake_get):
    fake_get(make_response(200, {"key": "mit", "name": "MIT License"}))

    with pytest.raises(FetchError):
        github_api.FetchLicense("mit")


def test_bad_list_shape(fake_get):
    fake_get(make_response(200, {"key": "mit"}))

    with pytest.raises(FetchError):
        github_api.FetchLicenseList()
