"""
Recommendation engine.

Combines a country's hazard risk with skill overlap to rank volunteer roles
and attaches a short rationale to each of the top results.
"""

from typing import Any, Dict, List, Optional, Sequence

from .catalog import Catalog, get_catalog, is_valid_path
from .errors import GeneratorError, InvalidPathError
from .logger import get_logger
from .models import (
    DEFAULT_RISK,
    Recommendation,
    RecommendRequest,
    RecommendResponse,
    RiskSnapshot,
    ScoredCandidate,
)
from .normalize import normalize_country
from .rationale import RationaleGenerator, build_why
from .scoring import rank_candidates, select_pool


def resolve_risk(snapshots: Sequence[RiskSnapshot], country: str) -> RiskSnapshot:
    """First snapshot whose country matches case-insensitively, else DEFAULT_RISK."""
    key = normalize_country(country)
    if key:
        for snapshot in snapshots:
            if normalize_country(snapshot.country) == key:
                return snapshot
    return DEFAULT_RISK


def build_generator_payload(
    request: RecommendRequest,
    risk: RiskSnapshot,
    ranked: Sequence[ScoredCandidate],
) -> Dict[str, Any]:
    return {
        "path": request.path,
        "country": request.country,
        "age": request.age,
        "language": request.language,
        "equityFlag": request.equity_flag,
        "skills": list(request.skills),
        "risk": risk.to_dict(),
        "roles": [
            {
                "id": c.role.id,
                "title": c.role.title,
                "skills": list(c.role.skills),
                "score": round(c.score, 4),
            }
            for c in ranked
        ],
    }


def _generated_rationales(
    generator: Optional[RationaleGenerator],
    request: RecommendRequest,
    risk: RiskSnapshot,
    ranked: Sequence[ScoredCandidate],
) -> Optional[List[str]]:
    """Rationales from the external generator, or None to use deterministic text.

    All-or-nothing: any failure discards the generator's output entirely.
    """
    if generator is None or not ranked:
        return None

    logger = get_logger()
    logger.record_generator_attempt()
    try:
        rationales = generator.generate(build_generator_payload(request, risk, ranked))
        if not isinstance(rationales, list) or len(rationales) != len(ranked):
            raise GeneratorError(
                f"Generator returned {len(rationales) if isinstance(rationales, list) else 'no'} "
                f"rationales for {len(ranked)} roles"
            )
        if not all(isinstance(r, str) and r.strip() for r in rationales):
            raise GeneratorError("Generator returned an empty rationale")
    except Exception as e:
        logger.record_generator_failure(type(e).__name__)
        logger.warning("Rationale generator unavailable, using deterministic rationale", error=str(e))
        return None

    logger.record_generator_success()
    return [r.strip() for r in rationales]


def recommend(
    request: RecommendRequest,
    catalog: Optional[Catalog] = None,
    generator: Optional[RationaleGenerator] = None,
) -> RecommendResponse:
    """
    Rank roles for a volunteer and explain each pick.

    Args:
        request: Normalized recommendation request
        catalog: Dataset source (default: process-wide catalog)
        generator: Optional external rationale generator

    Returns:
        RecommendResponse with the resolved risk and up to three recommendations

    Raises:
        InvalidPathError: If request.path is not a recognized path
        DatasetError: If the risk or role dataset can't be loaded
    """
    logger = get_logger()
    if not is_valid_path(request.path):
        logger.record_invalid_request("InvalidPathError")
        raise InvalidPathError(request.path)

    catalog = catalog or get_catalog()
    risk = resolve_risk(catalog.get_risk_snapshots(), request.country)
    pool = select_pool(catalog.get_roles(), request.path)
    ranked = rank_candidates(pool, risk, request.skills, request.equity_flag)

    rationales = _generated_rationales(generator, request, risk, ranked)
    if rationales is None:
        rationales = [build_why(c.role, risk, request.skills, request) for c in ranked]

    recommendations = [
        Recommendation(
            id=c.role.id,
            title=c.role.title,
            score=round(c.score, 4),
            microlearning=c.role.microlearning,
            why=why,
        )
        for c, why in zip(ranked, rationales)
    ]

    logger.record_recommendation()
    logger.debug(
        "Recommendations ranked",
        path=request.path,
        country=request.country,
        risk_source=risk.source,
        role_ids=[r.id for r in recommendations],
    )
    return RecommendResponse(country_risk=risk, recommendations=recommendations)
