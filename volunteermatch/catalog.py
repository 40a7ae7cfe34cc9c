"""
Catalog access for the static datasets.

Each dataset is read from the data directory once per process and cached.
Loading is guarded by a lock so concurrent first requests converge on one
cached value. A missing, empty, or malformed dataset raises DatasetError;
no built-in fallback catalog is substituted.
"""

import json
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .config import COUNTRY_FILE, NEWS_FILE, RISK_FILE, ROLES_FILE, Settings
from .errors import DatasetError
from .logger import get_logger
from .models import PATHS, CountryRecord, NewsItem, RiskSnapshot, Role
from .normalize import normalize_text


def is_valid_path(value) -> bool:
    return isinstance(value, str) and value in PATHS


def get_role_by_id(role_id: str, roles: List[Role]) -> Optional[Role]:
    for role in roles:
        if role.id == role_id:
            return role
    return None


def read_json_file(path: Path, label: str) -> List[Any]:
    """Read a JSON array dataset, raising DatasetError if unusable."""
    if not path.exists():
        raise DatasetError(f"{label} dataset is missing: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
    except OSError as e:
        raise DatasetError(f"{label} dataset could not be read: {e}") from e
    if not content:
        raise DatasetError(f"{label} dataset is missing or empty.")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise DatasetError(f"{label} dataset is not valid JSON: {e}") from e
    if not isinstance(data, list) or not data:
        raise DatasetError(f"{label} dataset is missing or empty.")
    return data


def _first_str(record: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = record.get(key)
        if isinstance(value, str):
            return value
    return None


def _parse_population(record: Dict[str, Any]) -> Optional[int]:
    for key in ("population", "Population"):
        value = record.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str) and value.strip():
            try:
                return int(value.strip().replace(",", ""))
            except ValueError:
                return None
    return None


def normalize_country_record(entry: Any) -> Optional[CountryRecord]:
    """Accept the alternate key spellings found in public country lists."""
    if not isinstance(entry, dict):
        return None
    name = _first_str(entry, "country", "Country", "name")
    iso2 = _first_str(entry, "iso2", "ISO2")
    iso3 = _first_str(entry, "iso3", "ISO3")
    if not name or not iso2 or not iso3:
        return None
    return CountryRecord(
        name=name,
        iso2=iso2.upper(),
        iso3=iso3.upper(),
        region=_first_str(entry, "region", "Region"),
        income_group=_first_str(entry, "incomeGroup", "income_group", "IncomeGroup"),
        population=_parse_population(entry),
    )


def _parse_records(raw: List[Any], factory: Callable, label: str) -> list:
    records = []
    for index, entry in enumerate(raw):
        try:
            records.append(factory(entry))
        except (TypeError, ValueError) as e:
            raise DatasetError(f"{label} dataset entry {index} is malformed: {e}") from e
    return records


def _parse_news(entry: Any) -> NewsItem:
    if not isinstance(entry, dict):
        raise ValueError("news entry must be an object")
    for key in ("title", "source", "url", "publishedAt"):
        if not isinstance(entry.get(key), str):
            raise ValueError(f"news entry is missing '{key}'")
    topics = entry.get("topics") or []
    return NewsItem(
        title=entry["title"],
        source=entry["source"],
        url=entry["url"],
        published_at=entry["publishedAt"],
        country=entry.get("country") or "",
        topics=tuple(normalize_text(t) for t in topics if isinstance(t, str)),
    )


class Catalog:
    """Process-scoped cache of the risk, role, country, and news datasets."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings.from_env()
        self._lock = threading.Lock()
        self._cache: Dict[str, list] = {}

    def _load_once(self, key: str, loader: Callable[[], list]) -> list:
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._cache.get(key)
            if cached is None:
                cached = loader()
                self._cache[key] = cached
                get_logger().debug("Loaded dataset", dataset=key, records=len(cached))
        return cached

    def _load_risk(self) -> List[RiskSnapshot]:
        raw = read_json_file(self.settings.path_for(RISK_FILE), "Risk")
        return _parse_records(raw, RiskSnapshot.from_dict, "Risk")

    def _load_roles(self) -> List[Role]:
        raw = read_json_file(self.settings.path_for(ROLES_FILE), "Role")
        roles = _parse_records(raw, Role.from_dict, "Role")
        seen = set()
        for role in roles:
            if role.id in seen:
                raise DatasetError(f"Role dataset has duplicate id: {role.id}")
            seen.add(role.id)
        return roles

    def _load_countries(self) -> List[CountryRecord]:
        raw = read_json_file(self.settings.path_for(COUNTRY_FILE), "Country")
        countries = [c for c in (normalize_country_record(e) for e in raw) if c is not None]
        if not countries:
            raise DatasetError("Country dataset is missing or empty.")
        return sorted(countries, key=lambda c: c.name.casefold())

    def _load_news(self) -> List[NewsItem]:
        raw = read_json_file(self.settings.path_for(NEWS_FILE), "News")
        return _parse_records(raw, _parse_news, "News")

    def get_risk_snapshots(self) -> List[RiskSnapshot]:
        return self._load_once("risk", self._load_risk)

    def get_roles(self) -> List[Role]:
        return self._load_once("roles", self._load_roles)

    def get_countries(self) -> List[CountryRecord]:
        return self._load_once("countries", self._load_countries)

    def get_news(self, country: Optional[str] = None, topic: Optional[str] = None) -> List[NewsItem]:
        """News items filtered case-insensitively by country and topic."""
        country_key = normalize_text(country) if country else ""
        topic_key = normalize_text(topic) if topic else ""
        items = []
        for item in self._load_once("news", self._load_news):
            if country_key and normalize_text(item.country) != country_key:
                continue
            if topic_key and topic_key not in item.topics:
                continue
            items.append(item)
        return items

    def invalidate(self) -> None:
        with self._lock:
            self._cache.clear()


_default_catalog: Optional[Catalog] = None
_default_lock = threading.Lock()


def get_catalog() -> Catalog:
    """Return the process-wide catalog, creating it on first use."""
    global _default_catalog
    if _default_catalog is None:
        with _default_lock:
            if _default_catalog is None:
                _default_catalog = Catalog()
    return _default_catalog


def get_risk_snapshots() -> List[RiskSnapshot]:
    return get_catalog().get_risk_snapshots()


def get_roles() -> List[Role]:
    return get_catalog().get_roles()


def get_countries() -> List[CountryRecord]:
    return get_catalog().get_countries()


def get_news(country: Optional[str] = None, topic: Optional[str] = None) -> List[NewsItem]:
    return get_catalog().get_news(country, topic)


def invalidate_caches() -> None:
    """Drop the process-wide catalog so the next call re-reads settings and files."""
    global _default_catalog
    with _default_lock:
        if _default_catalog is not None:
            _default_catalog.invalidate()
        _default_catalog = None
