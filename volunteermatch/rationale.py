"""
Rationale text for recommendations.

The deterministic builder is always available. An external generator may
replace the whole batch of rationales for a request, but never part of it.
"""

from typing import Any, Dict, List, Protocol, Sequence

from .errors import GeneratorError
from .models import HAZARDS, RecommendRequest, RiskSnapshot, Role
from .normalize import format_list

HAZARD_LABELS = {
    "flood": "flood",
    "cyclone": "cyclone",
    "heat": "extreme heat",
}

HAZARD_THRESHOLD = 0.3
MAX_HAZARDS = 2

GENERAL_FIT = "Based on limited data, this is a general fit."


class RationaleGenerator(Protocol):
    """Produces one rationale per ranked role, in input order, or raises."""

    def generate(self, payload: Dict[str, Any]) -> List[str]:
        ...


class DeterministicOnlyGenerator:
    """Generator that is never available; the engine falls back every time."""

    def generate(self, payload: Dict[str, Any]) -> List[str]:
        raise GeneratorError("External rationale generation is disabled")


def _sentence(text: str) -> str:
    return text[:1].upper() + text[1:]


def select_top_hazards(role: Role, risk: RiskSnapshot, limit: int = MAX_HAZARDS) -> List[str]:
    """Display labels for the hazards that make this role matter most here."""
    contributions = sorted(
        ((h, role.hazard_fit[h] * risk.hazard(h)) for h in HAZARDS),
        key=lambda entry: entry[1],
        reverse=True,
    )
    strong = [entry for entry in contributions if entry[1] >= HAZARD_THRESHOLD]
    selected = strong if strong else contributions[:1]
    return [HAZARD_LABELS[h] for h, _ in selected[:limit]]


def matching_skills(user_skills: Sequence[str], role: Role) -> List[str]:
    role_skills = set(role.normalized_skills)
    return [skill for skill in user_skills if skill in role_skills]


def build_why(
    role: Role,
    risk: RiskSnapshot,
    user_skills: Sequence[str],
    request: RecommendRequest,
) -> str:
    """Supportive two-sentence explanation built only from local data."""
    hazards = select_top_hazards(role, risk)
    matched = matching_skills(user_skills, role)

    if not hazards and not matched:
        return GENERAL_FIT

    if hazards:
        hazard_phrase = f"{format_list(hazards)} risks in {request.country or 'your area'}"
    else:
        hazard_phrase = "local needs"

    if matched:
        skills_phrase = f"{format_list(matched)} skills"
    else:
        skills_phrase = "willingness to learn"

    first = _sentence(f"{hazard_phrase} make the {role.title.lower()} role especially impactful for you.")
    second = _sentence(f"{risk.source} data and your {skills_phrase} align well with this role.")
    return f"{first} {second}"
