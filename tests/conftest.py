import json

import pytest
from fastapi.testclient import TestClient

from tourguide.api.main import app, get_delegate, get_store
from tourguide.tours.models import TourConfiguration
from tourguide.tours.store import InMemoryTourStore


class FakeDelegate:
    """
    Remplace le LLM : renvoie les réponses prévues dans l'ordre,
    ou lève `error` à chaque appel.
    """

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    def generate(self, prompt, system=None, max_new_tokens=1000, temperature=0.7):
        self.calls.append({"prompt": prompt, "system": system})
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return ""


SAMPLE_TOUR = {
    "title": "Issyk-Kul Nomad Trail",
    "duration": "5 days",
    "difficulty": "Medium",
    "highlights": ["Jeti-Oguz red rocks", "Yurt camp at Kyzyl-Suu"],
    "itinerary": [
        {
            "time": "09:00",
            "location": "Karakol",
            "description": "Dungan mosque and Holy Trinity cathedral",
            "tips": ["Bring cash in som"],
            "duration": "3 hours",
        },
        {
            "time": "14:00",
            "location": "Jeti-Oguz",
            "description": "Outdoor walk to the Seven Bulls rocks",
            "tips": ["Wear hiking boots"],
            "duration": "2 hours",
        },
    ],
    "recommendations": ["Try beshbarmak"],
    "logistics_notes": ["Fuel up in Karakol"],
}


def config_payload(**overrides):
    payload = {
        "primary_region": "issyk_kul",
        "duration": 5,
        "tour_type": "nomadic_experience",
        "budget": 3000,
        "vehicles": [
            {"type": "suv_4wd", "occupants": 4, "capacity": 5, "driver_included": True},
            {"type": "minivan", "occupants": 2, "capacity": 7},
        ],
        "location_preferences": [
            {"name": "Karakol", "priority": 8, "min_time": 4, "max_time": 24},
            {"name": "Jeti-Oguz", "priority": 6, "min_time": 2, "max_time": 6, "altitude": 2200},
        ],
        "configuration": {
            "mobility_level": 7,
            "adventure_level": 6,
            "cultural_immersion": 9,
            "nature_focus": 8,
            "traditional_experience": 9,
            "budget_flexibility": 5,
        },
        "season": "summer",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def tour_config():
    return TourConfiguration(**config_payload())


@pytest.fixture
def sample_tour_json():
    return json.dumps(SAMPLE_TOUR)


@pytest.fixture
def store():
    return InMemoryTourStore()


@pytest.fixture
def delegate():
    return FakeDelegate()


@pytest.fixture
def client(store, delegate):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_delegate] = lambda: delegate
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_delegate():
    return FakeDelegate


@pytest.fixture
def make_config_payload():
    return config_payload
