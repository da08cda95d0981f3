"""Pytest configuration and shared fixtures."""

import pytest

from alfredlicense.errors import FetchError

MIT_BODY = """MIT License

Copyright (c) [year] [fullname]

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction.
"""


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingFetch:
    """Fetch function returning canned payloads, or failing when told to."""

    def __init__(self, payloads: dict):
        self.payloads = payloads
        self.calls = []
        self.error = None

    def __call__(self, key: str):
        self.calls.append(key)

        if self.error is not None:
            raise self.error

        if key not in self.payloads:
            raise FetchError(f"no canned payload for {key}")

        return self.payloads[key]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mit_license():
    return {
        "key": "mit",
        "spdx_id": "MIT",
        "name": "MIT License",
        "html_url": "https://choosealicense.com/licenses/mit/",
        "description": "A short and simple permissive license.",
        "permissions": ["commercial-use", "modifications"],
        "conditions": ["include-copyright"],
        "limitations": ["liability", "warranty"],
        "body": MIT_BODY,
    }


@pytest.fixture
def license_list():
    return [
        {"key": "agpl-3.0", "name": "GNU Affero General Public License v3.0", "spdx_id": "AGPL-3.0", "url": None},
        {"key": "apache-2.0", "name": "Apache License 2.0", "spdx_id": "Apache-2.0", "url": None},
        {"key": "mit", "name": "MIT License", "spdx_id": "MIT", "url": None},
        {"key": "unlicense", "name": "The Unlicense", "spdx_id": "Unlicense", "url": None},
    ]


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "cache" / "used-licenses.json"


@pytest.fixture
def make_fetch():
    return RecordingFetch
