"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from pathlib import Path
from typing import Any, Dict, List

from volunteermatch.analytics import clear_role_clicks
from volunteermatch.catalog import Catalog, invalidate_caches
from volunteermatch.config import Settings
from volunteermatch.logger import get_logger, reset_logger
from volunteermatch.models import RecommendRequest


@pytest.fixture(autouse=True)
def fresh_state():
    """Give every test a clean logger, click log, and catalog cache."""
    reset_logger()
    get_logger(enable_console=False)
    clear_role_clicks()
    invalidate_caches()
    yield
    clear_role_clicks()
    invalidate_caches()
    reset_logger()


@pytest.fixture
def risk_data() -> List[Dict[str, Any]]:
    """Risk snapshots for a few countries."""
    return [
        {"country": "Kenya", "flood": 0.6, "cyclone": 0.2, "heat": 0.7, "source": "ASDI/NOAA"},
        {"country": "Philippines", "flood": 0.8, "cyclone": 0.9, "heat": 0.6, "source": "ASDI/NOAA"},
        {"country": "Iceland", "flood": 0.1, "cyclone": 0.05, "heat": 0.0, "source": "Met Office"},
    ]


@pytest.fixture
def roles_data() -> List[Dict[str, Any]]:
    """Role catalog spanning all three paths."""
    return [
        {
            "id": "role_01",
            "title": "Community Health Outreach Volunteer",
            "path": "help_hospitals",
            "skills": ["Communication", "First Aid", "local languages"],
            "hazard_fit": {"flood": 0.6, "cyclone": 0.4, "heat": 0.7},
            "microlearning": [{"title": "Heat illness basics", "link": "https://example.org/heat"}],
        },
        {
            "id": "role_06",
            "title": "Hospital Triage Support",
            "path": "help_hospitals",
            "skills": ["first aid", "communication", "calm under pressure"],
            "hazard_fit": {"flood": 0.5, "cyclone": 0.6, "heat": 0.4},
            "microlearning": [
                {"title": "Psychological first aid", "link": "https://example.org/pfa"},
                {"title": "Triage fundamentals", "link": "https://example.org/triage"},
            ],
        },
        {
            "id": "role_02",
            "title": "Cooling Center Assistant",
            "path": "help_hospitals",
            "skills": ["organization", "empathy"],
            "hazard_fit": {"flood": 0.1, "cyclone": 0.1, "heat": 0.95},
            "microlearning": [],
        },
        {
            "id": "role_03",
            "title": "Medical Supply Logistics Helper",
            "path": "help_hospitals",
            "skills": ["logistics", "driving"],
            "hazard_fit": {"flood": 0.7, "cyclone": 0.7, "heat": 0.3},
            "microlearning": [],
        },
        {
            "id": "role_04",
            "title": "Shelter Coordinator",
            "path": "post_disaster",
            "skills": ["organization", "leadership"],
            "hazard_fit": {"flood": 0.8, "cyclone": 0.9, "heat": 0.3},
            "microlearning": [],
        },
    ]


def write_dataset(directory: Path, filename: str, data) -> Path:
    path = directory / filename
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def dataset_writer():
    """Expose write_dataset to tests that build their own data directory."""
    return write_dataset


@pytest.fixture
def data_dir(tmp_path, risk_data, roles_data) -> Path:
    """Temporary data directory holding every dataset."""
    write_dataset(tmp_path, "risk_by_country.json", risk_data)
    write_dataset(tmp_path, "roles.json", roles_data)
    write_dataset(tmp_path, "countries.json", [
        {"country": "Kenya", "iso2": "ke", "iso3": "ken", "region": "Sub-Saharan Africa", "population": 55100586},
        {"Country": "Bangladesh", "ISO2": "BD", "ISO3": "BGD", "income_group": "Lower middle income", "Population": "172954319"},
        {"country": "Atlantis"},
    ])
    write_dataset(tmp_path, "news.json", [
        {"country": "Kenya", "topics": ["climate"], "title": "Cooling centers open", "source": "Daily Climate",
         "url": "https://example.org/ke", "publishedAt": "2024-07-06T07:15:00Z"},
        {"country": "Kenya", "topics": ["disaster"], "title": "Flood assessment teams deploy", "source": "Red Cross",
         "url": "https://example.org/ke-flood", "publishedAt": "2024-07-09T15:45:00Z"},
        {"country": "India", "topics": ["Disaster", "training"], "title": "Cyclone drill", "source": "Disaster Ready",
         "url": "https://example.org/in", "publishedAt": "2024-07-10T13:00:00Z"},
    ])
    return tmp_path


@pytest.fixture
def catalog(data_dir) -> Catalog:
    return Catalog(Settings(data_dir=data_dir))


@pytest.fixture
def kenya_request() -> RecommendRequest:
    return RecommendRequest(
        path="help_hospitals",
        country="Kenya",
        age=22,
        skills=["First Aid", " communication ", "first aid"],
        equity_flag=False,
    )
