import itertools
import json
from datetime import datetime, timedelta, timezone

import pytest
import requests

from app import create_app
from config import TestingConfig
from models.store import InMemoryPredictionStore
from risk.errors import PersistenceError, RemoteServiceError
from risk.remote_client import RemotePrediction
from risk.schemas import PatientMetrics

HIGH_RISK_PAYLOAD = {
    "age": 60, "gender": 2, "height": 170, "weight": 90, "ap_hi": 150, "ap_lo": 95,
    "cholesterol": 3, "gluc": 3, "smoke": 1, "alco": 0, "active": 0,
}

LOW_RISK_PAYLOAD = {
    "age": 30, "gender": 1, "height": 165, "weight": 55, "ap_hi": 110, "ap_lo": 70,
    "cholesterol": 1, "gluc": 1, "smoke": 0, "alco": 0, "active": 1,
}


def make_metrics(**overrides):
    return PatientMetrics(**dict(LOW_RISK_PAYLOAD, **overrides))


def make_response(body=None, status=200, url="http://ml.test/api/predict", raw=None):
    response = requests.Response()
    response.status_code = status
    response.url = url
    response._content = raw if raw is not None else json.dumps(body).encode()
    return response


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, "timeout": timeout, **kwargs})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeRemoteClient:
    base_url = "http://ml.test"

    def __init__(self, prediction=None, error=None, health=None):
        self.prediction = prediction
        self.error = error
        self.health = health
        self.calls = 0

    def estimate(self, metrics):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.prediction

    def check_health(self):
        if self.health is None:
            raise RemoteServiceError("connection", "Could not connect to http://ml.test/api/health")
        return {"health": self.health, "endpoint_used": "http://ml.test/api/health"}


class FailingStore:
    def save(self, record):
        raise PersistenceError("database is down")

    def list_predictions(self, page, limit, risk_level=None, gender=None):
        raise PersistenceError("database is down")

    def fetch_summary_fields(self):
        raise PersistenceError("database is down")


def remote_prediction(**overrides):
    values = dict(
        prediction=1, confidence=0.873, probability=0.81, risk_level="HIGH", bmi=27.4,
        bmi_category="Overweight", interpretation="Elevated risk", recommendation="See a cardiologist",
    )
    values.update(overrides)
    return RemotePrediction(**values)


def ticking_clock(start=datetime(2024, 1, 1, tzinfo=timezone.utc)):
    counter = itertools.count()
    return lambda: start + timedelta(seconds=next(counter))


@pytest.fixture
def store():
    return InMemoryPredictionStore(clock=ticking_clock())


@pytest.fixture
def offline_remote():
    return FakeRemoteClient(error=RemoteServiceError("timeout", "Timed out after 15s"))


def build_client(store, remote):
    app = create_app(TestingConfig, store=store, remote_client=remote)
    return app.test_client()
