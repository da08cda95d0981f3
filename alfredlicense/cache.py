import json
import os
import tempfile
import time
from pathlib import Path
from typing import Callable

from alfredlicense.console import VerbosePrint, console
from alfredlicense.errors import FetchError

# Reserved key under which GetAll() keeps the whole collection.
COLLECTION_KEY: str = "*"


class ExpiringKeyedCache:
    """
    A JSON file mapping keys to payloads, refreshed through a fetch function.
    The store carries one freshness timestamp for all of its items:
        {"timestamp": 1718000000.0, "items": {"mit": {...}, "isc": {...}}}
    A missing, unreadable or misshapen store is treated as empty. When a
    refresh fails the last known payload for the key is returned, however old.
    Parameters
    ----------
    storePath : Path
        Location of the JSON document. Parent directories are created on write.
    ttlSeconds : float
        How long, after the last successful fetch, stored items count as fresh.
    fetch : Callable[[str], object]
        Returns the payload for a key. Raises FetchError on failure.
    clock : Callable[[], float], optional
        Current time in seconds since the epoch, by default time.time.
    validate : Callable[[object], bool] | None, optional
        Checks a stored payload. One that fails is treated as absent: it is
        neither served fresh nor used as a stale fallback.
    """

    def __init__(
        self,
        storePath: Path,
        ttlSeconds: float,
        fetch: Callable[[str], object],
        clock: Callable[[], float] = time.time,
        validate: Callable[[object], bool] | None = None,
    ):
        self.storePath = Path(storePath)
        self.ttlSeconds = ttlSeconds
        self.fetch = fetch
        self.clock = clock
        self.validate = validate

    def Get(self, key: str, forceRefresh: bool = False) -> object:
        """
        Returns the payload for a key, fetching it when missing or expired.
        Parameters
        ----------
        key : str
            The item key (e.g., "mit").
        forceRefresh : bool, optional
            If True, skips the fresh-cache fast path, by default False.
        Returns
        -------
        object
            The fresh, cached, or stale payload.
        Raises
        ------
        FetchError
            If fetching failed and nothing is stored for the key.
        """

        timestamp, items = self._LoadStore()
        now = self.clock()
        hasUsable = key in items and self._IsUsable(items[key])

        if not hasUsable and key in items:
            VerbosePrint(
                f"[yellow]Warn:[/yellow] Discarding malformed '{key}' in {self.storePath.name}"
            )

        if hasUsable and not forceRefresh and self._IsFresh(timestamp, now):
            VerbosePrint(f"Cache hit for '{key}' in {self.storePath.name}")

            return items[key]

        try:
            payload = self.fetch(key)

        except FetchError as e:

            if hasUsable:
                console.print(
                    f"[yellow]Warn:[/yellow] Refresh of '{key}' failed ({e}). Using cached copy."
                )

                return items[key]

            raise

        items[key] = payload
        self._SaveStore(now, items)

        return payload

    def GetAll(self, forceRefresh: bool = False) -> object:
        """
        Returns the whole collection, with the same freshness and fallback
        rules as Get(). The fetch function is called with COLLECTION_KEY.
        """

        return self.Get(COLLECTION_KEY, forceRefresh=forceRefresh)

    def _IsUsable(self, payload: object) -> bool:

        return self.validate is None or bool(self.validate(payload))

    def _IsFresh(self, timestamp: float | None, now: float) -> bool:

        if timestamp is None:

            return False

        # a stamp from the future (clock skew, hand edits) never counts as fresh
        return 0 <= now - timestamp < self.ttlSeconds

    def _LoadStore(self) -> tuple[float | None, dict[str, object]]:
        """
        Reads the store from disk.
        Returns
        -------
        tuple[float | None, dict[str, object]]
            The freshness timestamp and the items, or (None, {}) when the file
            is absent or not a valid store.
        """

        if not self.storePath.exists():

            return None, {}

        try:
            content = self.storePath.read_text(encoding="utf-8")
            data = json.loads(content)

        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            VerbosePrint(
                f"[yellow]Warn:[/yellow] Load/parse cache {self.storePath}: {e}."
            )

            return None, {}

        if not isinstance(data, dict):
            VerbosePrint(f"[yellow]Warn:[/yellow] Cache {self.storePath} is not an object.")

            return None, {}

        timestamp, items = data.get("timestamp"), data.get("items")

        # bool is an int subclass, reject it explicitly
        if (
            isinstance(timestamp, bool)
            or not isinstance(timestamp, (int, float))
            or not isinstance(items, dict)
        ):
            VerbosePrint(f"[yellow]Warn:[/yellow] Unexpected cache shape in {self.storePath}.")

            return None, {}

        return float(timestamp), items

    def _SaveStore(self, timestamp: float, items: dict[str, object]) -> None:
        """
        Writes the store atomically: a temp file in the same directory is
        renamed over the old one.
        """

        tmpPath = None

        try:
            self.storePath.parent.mkdir(parents=True, exist_ok=True)
            fd, tmpPath = tempfile.mkstemp(
                dir=self.storePath.parent, prefix=f".{self.storePath.name}.", suffix=".tmp"
            )

            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"timestamp": timestamp, "items": items}, f, sort_keys=True)
            os.replace(tmpPath, self.storePath)
            tmpPath = None
            VerbosePrint(f"Cache saved to {self.storePath}")

        except OSError as e:
            console.print(f"[bold red]Error:[/bold red] Save cache {self.storePath}: {e}")

        finally:

            if tmpPath is not None and os.path.exists(tmpPath):
                os.unlink(tmpPath)
