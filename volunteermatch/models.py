"""
Data models for the recommendation engine.

Catalog records (RiskSnapshot, Role) are frozen once loaded. Request and
response objects serialize to the camelCase wire shape used by callers.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .normalize import unique_skills

PATHS = ("help_hospitals", "post_disaster", "green_workforce")
HAZARDS = ("flood", "cyclone", "heat")

NEUTRAL_HAZARD_VALUE = 0.5


def _unit_float(value: Any, label: str, default: Optional[float] = None) -> float:
    """Coerce to a float clamped into [0, 1]."""
    if value is None:
        if default is None:
            raise ValueError(f"Missing value for {label}")
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{label} must be a number, got {value!r}")
    value = float(value)
    if math.isnan(value):
        raise ValueError(f"{label} must not be NaN")
    return min(max(value, 0.0), 1.0)


def _required_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Field '{key}' must be a non-empty string")
    return value.strip()


@dataclass(frozen=True)
class RiskSnapshot:
    country: str
    flood: float
    cyclone: float
    heat: float
    source: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiskSnapshot":
        if not isinstance(data, dict):
            raise ValueError(f"Risk entry must be an object, got {type(data).__name__}")
        country = _required_str(data, "country")
        values = {
            h: _unit_float(data.get(h), f"{country}.{h}", NEUTRAL_HAZARD_VALUE)
            for h in HAZARDS
        }
        source = data.get("source")
        return cls(
            country=country,
            source=source.strip() if isinstance(source, str) and source.strip() else "unknown",
            **values,
        )

    def hazard(self, name: str) -> float:
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Any]:
        """Rounded hazard values plus source, as reported to callers."""
        return {
            "flood": round(self.flood, 2),
            "cyclone": round(self.cyclone, 2),
            "heat": round(self.heat, 2),
            "source": self.source,
        }


DEFAULT_RISK = RiskSnapshot(
    country="",
    flood=NEUTRAL_HAZARD_VALUE,
    cyclone=NEUTRAL_HAZARD_VALUE,
    heat=NEUTRAL_HAZARD_VALUE,
    source="default",
)


@dataclass(frozen=True)
class MicroLesson:
    title: str
    link: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "link": self.link}


@dataclass(frozen=True)
class Role:
    id: str
    title: str
    path: str
    skills: Tuple[str, ...]
    hazard_fit: Dict[str, float]
    microlearning: Tuple[MicroLesson, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Role":
        if not isinstance(data, dict):
            raise ValueError(f"Role entry must be an object, got {type(data).__name__}")
        role_id = _required_str(data, "id")
        path = _required_str(data, "path")
        if path not in PATHS:
            raise ValueError(f"Role {role_id} has unknown path {path!r}")

        skills = data.get("skills") or []
        if not isinstance(skills, list):
            raise ValueError(f"Role {role_id} skills must be a list")

        fit = data.get("hazard_fit") or {}
        if not isinstance(fit, dict):
            raise ValueError(f"Role {role_id} hazard_fit must be an object")

        lessons = []
        for item in data.get("microlearning") or []:
            if not isinstance(item, dict):
                raise ValueError(f"Role {role_id} microlearning entries must be objects")
            lessons.append(MicroLesson(
                title=_required_str(item, "title"),
                link=_required_str(item, "link"),
            ))

        return cls(
            id=role_id,
            title=_required_str(data, "title"),
            path=path,
            skills=tuple(s.strip() for s in skills if isinstance(s, str) and s.strip()),
            hazard_fit={h: _unit_float(fit.get(h), f"{role_id}.hazard_fit.{h}", 0.0) for h in HAZARDS},
            microlearning=tuple(lessons),
        )

    @property
    def normalized_skills(self) -> List[str]:
        return unique_skills(self.skills)


@dataclass
class RecommendRequest:
    """One recommendation call. Skills are normalized on construction."""

    path: str
    country: str = ""
    age: float = 0
    skills: List[str] = field(default_factory=list)
    language: Optional[str] = None
    equity_flag: bool = False

    def __post_init__(self):
        self.country = self.country.strip() if isinstance(self.country, str) else ""
        self.skills = unique_skills(self.skills)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "country": self.country,
            "age": self.age,
            "skills": list(self.skills),
            "language": self.language,
            "equityFlag": self.equity_flag,
        }


@dataclass(frozen=True)
class ScoredCandidate:
    role: Role
    score: float
    hazard_fit: float
    skill_overlap: float


@dataclass
class Recommendation:
    id: str
    title: str
    score: float
    microlearning: Tuple[MicroLesson, ...]
    why: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "score": self.score,
            "microlearning": [m.to_dict() for m in self.microlearning],
            "why": self.why,
        }


@dataclass
class RecommendResponse:
    country_risk: RiskSnapshot
    recommendations: List[Recommendation]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "countryRisk": self.country_risk.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass(frozen=True)
class RoleClickEvent:
    role_id: str
    path: str
    timestamp: str
    country: Optional[str] = None
    user_agent: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"roleId": self.role_id, "path": self.path, "timestamp": self.timestamp}
        if self.country is not None:
            data["country"] = self.country
        if self.user_agent is not None:
            data["userAgent"] = self.user_agent
        return data


@dataclass(frozen=True)
class CountryRecord:
    name: str
    iso2: str
    iso3: str
    region: Optional[str] = None
    income_group: Optional[str] = None
    population: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "iso2": self.iso2,
            "iso3": self.iso3,
            "region": self.region,
            "incomeGroup": self.income_group,
            "population": self.population,
        }


@dataclass(frozen=True)
class NewsItem:
    title: str
    source: str
    url: str
    published_at: str
    country: str = ""
    topics: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, str]:
        return {
            "title": self.title,
            "source": self.source,
            "url": self.url,
            "publishedAt": self.published_at,
        }
