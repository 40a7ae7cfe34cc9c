"""
Scoring Logic for Role Recommendations.

Responsibilities:
- Compute a deterministic score for a role given a country risk snapshot
  and the volunteer's normalized skills.
- Rank candidates and keep the top results.

Non-Responsibilities:
- No catalog loading.
- No rationale text.

Invariant:
Given identical inputs, this module must always return the same scores
in the same order. Every score lies in [0, 1].
"""

import math
from typing import Dict, Iterable, List, Sequence

from .models import HAZARDS, RiskSnapshot, Role, ScoredCandidate
from .normalize import unique_skills

HAZARD_WEIGHTS: Dict[str, float] = {
    "flood": 0.5,
    "cyclone": 0.3,
    "heat": 0.2,
}

HAZARD_WEIGHT = 0.4
SKILL_WEIGHT = 0.4
EQUITY_WEIGHT = 0.2
EQUITY_BONUS = 0.1

TOP_N = 3


def compute_hazard_fit(role: Role, risk: RiskSnapshot) -> float:
    return sum(
        role.hazard_fit[h] * risk.hazard(h) * HAZARD_WEIGHTS[h]
        for h in HAZARDS
    )


def skill_overlap(user_skills: Iterable[str], role_skills: Iterable[str]) -> float:
    """Jaccard index over normalized skill sets; 0 when either side is empty."""
    user = set(unique_skills(user_skills))
    role = set(unique_skills(role_skills))
    if not user or not role:
        return 0.0
    return len(user & role) / len(user | role)


def clamp_score(score: float) -> float:
    if math.isnan(score):
        return 0.0
    return min(max(score, 0.0), 1.0)


def score_role(
    role: Role,
    risk: RiskSnapshot,
    user_skills: Sequence[str],
    equity_flag: bool = False,
) -> ScoredCandidate:
    hazard_fit = compute_hazard_fit(role, risk)
    overlap = skill_overlap(user_skills, role.skills)
    equity_boost = EQUITY_BONUS if equity_flag else 0.0
    raw = HAZARD_WEIGHT * hazard_fit + SKILL_WEIGHT * overlap + EQUITY_WEIGHT * equity_boost
    return ScoredCandidate(
        role=role,
        score=clamp_score(raw),
        hazard_fit=hazard_fit,
        skill_overlap=overlap,
    )


def select_pool(roles: Sequence[Role], path: str) -> List[Role]:
    """Roles on the requested path, or the whole catalog if none match."""
    matching = [role for role in roles if role.path == path]
    return matching if matching else list(roles)


def rank_candidates(
    roles: Sequence[Role],
    risk: RiskSnapshot,
    user_skills: Sequence[str],
    equity_flag: bool = False,
    limit: int = TOP_N,
) -> List[ScoredCandidate]:
    """Score every role and return the best `limit`, ties in catalog order."""
    scored = [score_role(role, risk, user_skills, equity_flag) for role in roles]
    # sorted() is stable with reverse=True, so equal scores keep catalog order
    ranked = sorted(scored, key=lambda c: c.score, reverse=True)
    return ranked[:limit]
