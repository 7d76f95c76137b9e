"""Shared fixtures: an app on in-memory SQLite with a stub classifier."""

import base64

import pytest

from app import create_app
from auth import register_user
from config import TestingConfig
from models import db


class StubClassifier:
    """Returns a fixed prediction and remembers what it was given."""

    def __init__(self, label="banana", score=0.93):
        self.label = label
        self.score = score
        self.calls = []

    def classify(self, image_bytes):
        self.calls.append(image_bytes)
        return [
            {"label": self.label, "score": self.score},
            {"label": "lemon", "score": 0.02},
        ]


@pytest.fixture
def classifier():
    return StubClassifier()


@pytest.fixture
def app(classifier):
    app = create_app(TestingConfig, classifier=classifier)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def donor(app):
    return register_user("donor@example.com", "secret", "Dana Donor")


@pytest.fixture
def other_user(app):
    return register_user("other@example.com", "secret", "Oli Other")


def auth_headers(user):
    return {"Authorization": f"Bearer {user.api_token}"}


@pytest.fixture
def listing_data():
    return {
        "food_type": "Bread",
        "quantity": "10 lbs",
        "description": "Day-old sourdough loaves",
        "location": "12 Baker Street",
        "available_until": "2026-12-01T18:00:00Z",
        "contact_info": "a@b.com",
    }


@pytest.fixture
def image_data():
    return "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xff fake jpeg").decode()
