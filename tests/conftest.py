"""
Shared fixtures: the bundled sample chart request.
"""
from __future__ import annotations

import copy
import json
from pathlib import Path

import pytest

from packages.shared.models import SendConfig, parse_chart_request

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def load_fixture(name: str):
    with open(FIXTURES / name, "r", encoding="utf-8") as f:
        return json.load(f)


_SAMPLE = {
    "patient": load_fixture("sample_patient.json"),
    "encounter": load_fixture("sample_encounter.json"),
    "observation_sets": load_fixture("sample_observations.json"),
    "location": load_fixture("sample_location.json"),
    "trustomer": load_fixture("sample_trustomer.json"),
}


@pytest.fixture
def sample_body() -> dict:
    return copy.deepcopy(_SAMPLE)


@pytest.fixture
def sample_request(sample_body):
    return parse_chart_request(sample_body)


@pytest.fixture
def send_config(sample_request):
    return sample_request.send_config


@pytest.fixture
def ouh_send_config():
    return SendConfig.model_validate(load_fixture("sample_trustomer_ouh.json")["send_config"])
