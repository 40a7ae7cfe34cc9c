from typing import Iterable, List, Optional


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def normalize_skill(skill) -> Optional[str]:
    """Lower-case and collapse whitespace; None for blanks and non-strings."""
    if not isinstance(skill, str):
        return None
    normalized = normalize_text(skill)
    return normalized or None


def unique_skills(skills: Iterable) -> List[str]:
    """Normalize and deduplicate skills, keeping first-seen order.

    A bare string is treated as a single skill.
    """
    if isinstance(skills, str):
        skills = [skills]
    seen = {}
    for skill in skills or []:
        normalized = normalize_skill(skill)
        if normalized:
            seen.setdefault(normalized, None)
    return list(seen)


def normalize_country(country) -> str:
    if not isinstance(country, str):
        return ""
    return normalize_text(country)


def format_list(items: List[str]) -> str:
    """Join as "A", "A and B", or "A, B, and C"."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} and {items[1]}"
    return f"{', '.join(items[:-1])}, and {items[-1]}"
