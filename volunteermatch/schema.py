import math
from typing import Any, Dict, List, Optional

from .catalog import is_valid_path
from .errors import InvalidPathError, RequestError
from .models import PATHS, RecommendRequest

OPTIONAL_STR_FIELDS = ["country", "language"]


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def validate_request(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Only `path` is required; other fields are checked for type when present.
    """
    if not isinstance(data, dict):
        return ["Request body must be a JSON object"]

    errors: List[str] = []

    if "path" not in data:
        errors.append("Missing required field: path")
    elif not is_valid_path(data["path"]):
        errors.append(f"Field 'path' must be one of: {', '.join(PATHS)}")

    for f in OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    if "age" in data and not _is_number(data["age"]):
        errors.append("Field 'age' must be a number")

    skills = data.get("skills")
    if skills is not None:
        if not isinstance(skills, list):
            errors.append("Field 'skills' must be a list of strings")
        elif not all(isinstance(s, str) for s in skills):
            errors.append("Field 'skills' must only contain strings")

    if "equityFlag" in data and not isinstance(data["equityFlag"], bool):
        errors.append("Field 'equityFlag' must be a boolean")

    return errors


def parse_recommend_request(data: Dict[str, Any]) -> RecommendRequest:
    """Build a RecommendRequest from a loosely typed body.

    Only the path is strict. Bad optional fields fall back to defaults.
    """
    if not isinstance(data, dict):
        raise RequestError("Invalid request body")

    path = data.get("path")
    if not is_valid_path(path):
        raise InvalidPathError(path)

    country = data.get("country")
    age = data.get("age")
    skills = data.get("skills")
    language = data.get("language")
    equity_flag = data.get("equityFlag")

    return RecommendRequest(
        path=path,
        country=country.strip() if isinstance(country, str) else "",
        age=age if _is_number(age) else 0,
        skills=[s for s in skills if isinstance(s, str)] if isinstance(skills, list) else [],
        language=language if isinstance(language, str) else None,
        equity_flag=equity_flag if isinstance(equity_flag, bool) else False,
    )


def parse_click_request(data: Dict[str, Any], user_agent: Optional[str] = None) -> Dict[str, Any]:
    """Validate a click-tracking body into keyword arguments for record_role_click."""
    if not isinstance(data, dict):
        raise RequestError("Invalid request body")

    role_id = data.get("roleId")
    path = data.get("path")
    if not isinstance(role_id, str) or not role_id.strip() or not is_valid_path(path):
        raise RequestError("roleId and path are required")

    country = data.get("country")
    return {
        "role_id": role_id.strip(),
        "path": path,
        "country": country if isinstance(country, str) else None,
        "user_agent": user_agent,
    }
