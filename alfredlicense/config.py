from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Mapping

from alfredlicense.cache import ExpiringKeyedCache
from alfredlicense.github_api import HTTP_TIMEOUT_SECONDS, FetchLicense, FetchLicenseList

DEFAULT_CACHE_DIR: str = "/tmp/alfred-choosealicense-cache"
LIST_CACHE_FILENAME: str = "list-licenses.json"
LICENSE_CACHE_FILENAME: str = "used-licenses.json"

# The catalogue changes rarely, license texts even more rarely.
LIST_TTL_SECONDS: int = 86400
LICENSE_TTL_SECONDS: int = 31536000


def IsLicenseList(payload: object) -> bool:
    """A stored catalogue is usable only as a list of records that each carry a key."""

    return isinstance(payload, list) and all(
        isinstance(lic, dict) and isinstance(lic.get("key"), str) and lic["key"]
        for lic in payload
    )


def IsLicenseRecord(payload: object) -> bool:

    return isinstance(payload, dict) and isinstance(payload.get("body"), str)


@dataclass
class WorkflowConfig:
    cacheDir: Path
    githubToken: str | None = None
    fullname: str | None = None
    listTtlSeconds: int = LIST_TTL_SECONDS
    licenseTtlSeconds: int = LICENSE_TTL_SECONDS
    httpTimeout: float = HTTP_TIMEOUT_SECONDS
    verbose: bool = False


def LoadWorkflowConfig(
    environ: Mapping[str, str],
    cacheDir: Path | None = None,
    fullname: str | None = None,
    verbose: bool = False,
) -> WorkflowConfig:
    """
    Builds the configuration from Alfred's environment and CLI overrides.
    Parameters
    ----------
    environ : Mapping[str, str]
        Process environment. Alfred sets "alfred_workflow_cache" and
        "alfred_debug"; "license_fullname" is a workflow variable and
        "GITHUB_TOKEN" is optional.
    cacheDir : Path | None, optional
        Overrides the cache directory.
    fullname : str | None, optional
        Overrides the copyright holder name.
    verbose : bool, optional
        Forces verbose output.
    Returns
    -------
    WorkflowConfig
    """

    return WorkflowConfig(
        cacheDir=Path(
            cacheDir or environ.get("alfred_workflow_cache") or DEFAULT_CACHE_DIR
        ),
        githubToken=environ.get("GITHUB_TOKEN") or None,
        fullname=fullname or environ.get("license_fullname") or None,
        verbose=verbose or environ.get("alfred_debug") == "1",
    )


def BuildLicenseCaches(
    config: WorkflowConfig,
) -> tuple[ExpiringKeyedCache, ExpiringKeyedCache]:
    """
    Creates the catalogue cache and the per-license cache.
    Returns
    -------
    tuple[ExpiringKeyedCache, ExpiringKeyedCache]
        (listCache, licenseCache). Use listCache.GetAll() and
        licenseCache.Get(key).
    """

    listCache = ExpiringKeyedCache(
        config.cacheDir / LIST_CACHE_FILENAME,
        config.listTtlSeconds,
        lambda _key: FetchLicenseList(
            token=config.githubToken, timeout=config.httpTimeout
        ),
        validate=IsLicenseList,
    )
    licenseCache = ExpiringKeyedCache(
        config.cacheDir / LICENSE_CACHE_FILENAME,
        config.licenseTtlSeconds,
        partial(FetchLicense, token=config.githubToken, timeout=config.httpTimeout),
        validate=IsLicenseRecord,
    )

    return listCache, licenseCache
