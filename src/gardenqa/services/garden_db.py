import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Literal, Mapping
from urllib.parse import unquote, urlparse

import requests

from gardenqa.errors import FormatError, LoadError
from gardenqa.services import http

log = logging.getLogger(__name__)

LoadState = Literal["idle", "loading", "ok", "error"]


@dataclass(frozen=True)
class QAPair:
    q: str
    a: str


@dataclass(frozen=True)
class Record:
    id: str
    category: str
    keys: tuple[str, ...] = ()
    qa: tuple[QAPair, ...] = ()


@dataclass(frozen=True)
class Database:
    items: tuple[Record, ...]
    meta: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def version(self) -> str:
        return str(self.meta.get("version") or "unknown")

    @property
    def updated_at(self) -> str:
        return str(self.meta.get("updated_at") or "unknown")


@dataclass(frozen=True)
class LoadStatus:
    state: LoadState
    message: str


def _require_str(raw: dict, name: str, where: str) -> str:
    value = raw.get(name)
    if not isinstance(value, str):
        raise FormatError(f"{where}: '{name}' must be a string, got {type(value).__name__}")
    return value


def _parse_record(raw: Any, index: int) -> Record:
    where = f"items[{index}]"
    if not isinstance(raw, dict):
        raise FormatError(f"{where} must be an object")

    keys_raw = raw.get("keys", [])
    if not isinstance(keys_raw, list) or not all(isinstance(k, str) for k in keys_raw):
        raise FormatError(f"{where}: 'keys' must be a list of strings")

    qa_raw = raw.get("qa", [])
    if not isinstance(qa_raw, list):
        raise FormatError(f"{where}: 'qa' must be a list")
    qa: list[QAPair] = []
    for j, pair in enumerate(qa_raw):
        if not isinstance(pair, dict):
            raise FormatError(f"{where}.qa[{j}] must be an object")
        qa.append(QAPair(
            q=_require_str(pair, "q", f"{where}.qa[{j}]"),
            a=_require_str(pair, "a", f"{where}.qa[{j}]"),
        ))

    return Record(
        id=_require_str(raw, "id", where),
        category=_require_str(raw, "category", where),
        keys=tuple(keys_raw),
        qa=tuple(qa),
    )


def parse_database(raw: Any) -> Database:
    """
    Validate a decoded garden-db document and build a frozen Database.

    Expected shape:
    {
      "meta": {"version": "...", "updated_at": "..."},   # optional
      "items": [
        {"id": "...", "category": "...", "keys": ["..."], "qa": [{"q": "...", "a": "..."}]},
        ...
      ]
    }

    Raises FormatError on any structural violation.
    """
    if not isinstance(raw, dict):
        raise FormatError("document root must be an object")

    items = raw.get("items")
    if not isinstance(items, list):
        raise FormatError("document has no 'items' array")

    meta = raw.get("meta", {})
    if not isinstance(meta, dict):
        raise FormatError("'meta' must be an object")

    records = tuple(_parse_record(item, i) for i, item in enumerate(items))
    return Database(items=records, meta=MappingProxyType(dict(meta)))


def _is_http(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def _local_path(source: str) -> Path:
    parsed = urlparse(source)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(source)


class GardenDBLoader:
    """Session-scoped loader: fetches the garden DB once and keeps it."""

    def __init__(self, source: str, *, timeout: float = 30) -> None:
        self.source = source
        self.timeout = timeout
        self.fetch_count = 0
        self._db: Database | None = None
        self._format_error: FormatError | None = None
        self._lock = asyncio.Lock()
        self._status = LoadStatus("idle", "Database not loaded yet.")

    @property
    def status(self) -> LoadStatus:
        return self._status

    def get(self) -> Database | None:
        return self._db

    def reset(self) -> None:
        """Forget the cached database (and any format error) to start a new session."""
        self._db = None
        self._format_error = None
        self._status = LoadStatus("idle", "Database not loaded yet.")

    async def load(self) -> Database:
        if self._db is not None:
            return self._db
        if self._format_error is not None:
            raise self._format_error

        async with self._lock:
            # Another caller may have finished the fetch while we waited.
            if self._db is not None:
                return self._db
            if self._format_error is not None:
                raise self._format_error

            self._status = LoadStatus("loading", "Loading database...")
            try:
                raw = await self._fetch()
                db = parse_database(raw)
            except LoadError as exc:
                log.error("Failed to load garden DB from %s: %s", self.source, exc)
                self._status = LoadStatus(
                    "error",
                    "Could not load the database. Check the network and the URL, then try again.",
                )
                raise
            except FormatError as exc:
                log.error("Garden DB at %s has an invalid format: %s", self.source, exc)
                self._format_error = exc
                self._status = LoadStatus(
                    "error",
                    "The database file is malformed. It cannot be used until it is fixed.",
                )
                raise

            self._db = db
            self._status = LoadStatus(
                "ok",
                f"Database loaded (version: {db.version} / updated: {db.updated_at})",
            )
            log.info("Loaded %d garden DB items from %s", len(db.items), self.source)
            return db

    async def _fetch(self) -> Any:
        self.fetch_count += 1
        if _is_http(self.source):
            return await self._fetch_http()
        return await self._fetch_file()

    async def _fetch_http(self) -> Any:
        try:
            resp = await http.get_fresh(self.source, timeout=self.timeout)
        except requests.RequestException as exc:
            raise LoadError(f"request to {self.source} failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise LoadError(f"HTTP {resp.status_code} from {self.source}")

        try:
            return resp.json()
        except ValueError as exc:
            raise LoadError(f"response from {self.source} is not valid JSON: {exc}") from exc

    async def _fetch_file(self) -> Any:
        path = _local_path(self.source)
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise LoadError(f"could not read {path}: {exc}") from exc

        try:
            return json.loads(text)
        except ValueError as exc:
            raise LoadError(f"{path} is not valid JSON: {exc}") from exc
