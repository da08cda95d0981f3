import requests

from alfredlicense import __version__
from alfredlicense.console import VerbosePrint, console
from alfredlicense.errors import FetchError, LicenseNotFoundError

GITHUB_API_URL: str = "https://api.github.com"
GITHUB_API_VERSION: str = "2022-11-28"
HTTP_TIMEOUT_SECONDS: float = 5

LICENSE_DETAIL_FIELDS: list[str] = [
    "key",
    "spdx_id",
    "name",
    "html_url",
    "description",
    "permissions",
    "conditions",
    "limitations",
    "body",
]


def GetGithubApi(
    endpoint: str, token: str | None = None, timeout: float = HTTP_TIMEOUT_SECONDS
) -> dict | list:
    """
    Makes a GET request to the GitHub API.
    Parameters
    ----------
    endpoint : str
        The API endpoint to request (e.g., "/licenses/mit").
    token : str | None, optional
        A GitHub token, raising the anonymous rate limit.
    timeout : float, optional
        Seconds before the request is abandoned, by default 5.
    Returns
    -------
    dict | list
        The decoded JSON response.
    Raises
    ------
    LicenseNotFoundError
        On HTTP 404.
    FetchError
        On timeouts, connection errors, other error statuses, or a body that is
        not JSON.
    """

    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
        "User-Agent": f"Choose-License-Alfred-Workflow/{__version__}",
    }

    if token:
        headers["Authorization"] = f"Bearer {token}"
    url = f"{GITHUB_API_URL}{endpoint}"
    VerbosePrint(f"GET {url}")

    try:
        r = requests.get(url, headers=headers, timeout=timeout)
        r.raise_for_status()
        data = r.json()

    except requests.exceptions.Timeout as e:
        console.print(f"[bold red]Error:[/bold red] Timeout API ({url})")

        raise FetchError(f"Timed out after {timeout}s") from e

    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None

        if status == 404:

            raise LicenseNotFoundError(endpoint.rsplit("/", 1)[-1]) from e

        console.print(f"[bold red]Error:[/bold red] API ({url}): {e}")

        if status == 403:
            console.print(
                f"[yellow]Hint:[/yellow] Rate limits (Remaining: {e.response.headers.get('X-RateLimit-Remaining', 'N/A')}) or GITHUB_TOKEN."
            )

        raise FetchError(f"GitHub API returned {status}") from e

    except requests.exceptions.RequestException as e:
        console.print(f"[bold red]Error:[/bold red] API ({url}): {e}")

        raise FetchError(f"Request failed: {e}") from e

    # requests raises its own JSONDecodeError, a ValueError subclass
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] Bad JSON from {url}")

        raise FetchError(f"Failed to parse response: {e}") from e

    if isinstance(data, dict) and "message" in data and "documentation_url" in data:

        raise FetchError(f"GitHub API: {data['message']}")

    return data


def FetchLicenseList(token: str | None = None, timeout: float = HTTP_TIMEOUT_SECONDS) -> list[dict]:
    """
    Fetches the license catalogue.
    Returns
    -------
    list[dict]
        Summary records with "key", "name", "spdx_id" and "url".
    """

    data = GetGithubApi("/licenses", token=token, timeout=timeout)

    if not isinstance(data, list) or not all(
        isinstance(item, dict) and item.get("key") for item in data
    ):

        raise FetchError("Bad license list from GitHub API")

    return [
        {k: item.get(k) for k in ["key", "name", "spdx_id", "url"]} for item in data
    ]


def FetchLicense(
    key: str, token: str | None = None, timeout: float = HTTP_TIMEOUT_SECONDS
) -> dict:
    """
    Fetches one license with its metadata and full text.
    Parameters
    ----------
    key : str
        The license key (e.g., "apache-2.0").
    Returns
    -------
    dict
        The record trimmed to LICENSE_DETAIL_FIELDS.
    """

    data = GetGithubApi(f"/licenses/{key.lower()}", token=token, timeout=timeout)

    if not isinstance(data, dict) or not isinstance(data.get("body"), str):

        raise FetchError(f"License content not found for '{key}'")

    record = {k: data.get(k) for k in LICENSE_DETAIL_FIELDS}

    for k in ["permissions", "conditions", "limitations"]:
        record[k] = record[k] or []

    return record
