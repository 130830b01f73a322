"""
Test file for the HTTP API

Run with: python -m pytest backend/screening/api/test_api.py -v
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from fastapi.testclient import TestClient

from main import app
from screening.core.config import settings

BASE = f"{settings.API_V1_STR}/assessments"


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_root_and_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    body = client.get("/").json()
    assert body["name"] == settings.PROJECT_NAME
    assert body["status"] == "running"


def test_assess_text(client):
    response = client.post(f"{BASE}/text", json={"text": "G2P2, 2 SVD, no complications, BMI 22"})
    assert response.status_code == 200
    body = response.json()
    print(f"\nOverall: {body['result']['overall_risk']}")

    assert body["result"]["overall_risk"]["level"] == "ELIGIBLE"
    assert body["profile"]["pregnancy_history"]["number_of_term_pregnancies"] == 2
    assert set(body["result"]["clinic_type_analysis"]) >= {"strict", "moderate", "lenient", "best_match"}


def test_assess_text_with_documents_and_overrides(client):
    payload = {
        "documents": [{"filename": "ob.txt", "text": "G1P1, 1 SVD."}],
        "options": {"provided_age": 33, "provided_bmi": 25},
        "display_name": "Candidate 12",
    }
    body = client.post(f"{BASE}/text", json=payload).json()

    assert body["profile"]["age"] == 33
    assert body["profile"]["display_name"] == "Candidate 12"
    assert body["profile"]["parsing_metadata"]["per_field_confidence"]["age"] == 100


def test_assess_profile(client):
    payload = {"profile": {"age": 46, "bmi": 24, "medical_conditions": ["active_cancer"]}}
    body = client.post(f"{BASE}/profile", json=payload).json()

    assert body["result"]["overall_risk"]["level"] == "DISQUALIFIED"
    assert body["profile"]["parsing_metadata"]["final_confidence"] == 100


def test_extract_only(client):
    body = client.post(f"{BASE}/extract", json={"text": "28 yo, BMI 23.5"}).json()
    assert body["profile"]["age"] == 28
    assert body["profile"]["bmi"] == 23.5
    assert "result" not in body


def test_empty_text_is_rejected(client):
    response = client.post(f"{BASE}/text", json={"text": "   "})
    assert response.status_code == 422
    assert "No narrative text" in response.json()["detail"]


def test_glossary(client):
    body = client.get(f"{BASE}/glossary").json()
    terms = [term for entries in body["categories"].values() for term in entries]
    assert body["vocabulary_version"]
    assert len(terms) >= 150
    gdm = next(t for t in terms if t["condition_code"] == "gestational_diabetes")
    assert gdm["severity"] == "moderate"
