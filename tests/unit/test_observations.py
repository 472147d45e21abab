"""
Unit tests for observation set accessors.
"""
from __future__ import annotations

import pytest

from packages.shared.models import (
    ChartField,
    ObservationSet,
    ObservationSetJson,
    ObservationType,
    Reading,
    ReadingPair,
    Sentinel,
    TimelineEntry,
)
from packages.shared.models.observations import canonical_nurse_concern


@pytest.fixture
def obs_sets(sample_request, send_config):
    return {o.uuid: ObservationSet.from_json(o, send_config) for o in sample_request.observation_sets}


def test_unknown_observation_types_are_ignored(obs_sets):
    first = obs_sets["obs-set-01"]
    assert set(first.readings) == set(ObservationType)


def test_absent_reading_is_missing(obs_sets):
    assert obs_sets["obs-set-08"].reading(ObservationType.TEMPERATURE) is Sentinel.MISSING


def test_refused_reading(obs_sets):
    obs = obs_sets["obs-set-15"]
    assert obs.systolic_blood_pressure is Sentinel.REFUSED
    assert obs.diastolic_blood_pressure == 80
    pair = obs.blood_pressure
    assert isinstance(pair, ReadingPair)
    assert pair.high is Sentinel.REFUSED
    assert pair.low.observation_value == 80


def test_null_value_is_missing(obs_sets):
    assert obs_sets["obs-set-01"].bp == (114, Sentinel.MISSING)


def test_room_air(obs_sets):
    obs = obs_sets["obs-set-09"]
    assert obs.air == "A"
    assert obs.o2_per_min == ""
    assert obs.o2_device == "RA"
    assert not obs.is_oxygen
    assert obs.spo2_scale_2_air.observation_value == 88
    assert obs.spo2_scale_2_o2 is Sentinel.MISSING
    assert obs.spo2_scale_1 is Sentinel.MISSING


def test_supplemental_oxygen(obs_sets):
    obs = obs_sets["obs-set-07"]
    assert obs.air == ""
    assert obs.o2_per_min == "2"
    assert obs.o2_device == "N"
    assert obs.is_oxygen
    assert obs.spo2_scale_2_o2.observation_value == 90
    assert obs.spo2_scale_2_air is Sentinel.MISSING


def test_mask_percent_fills_device_code(obs_sets):
    assert obs_sets["obs-set-13"].o2_device == "V28"


def test_mask_without_percent_uses_room_air_percentage(send_config):
    obs_set = ObservationSetJson(
        record_time="2019-02-01T10:00:00Z",
        observations=[
            Reading(
                observation_type="o2_therapy_status",
                observation_value=30,
                observation_metadata={"mask": "humidified"},
            )
        ],
    )
    assert ObservationSet.from_json(obs_set, send_config).o2_device == "H21"


def test_unmapped_mask_is_shown_as_recorded(send_config):
    obs_set = ObservationSetJson(
        observations=[
            Reading(observation_type="o2_therapy_status", observation_value=1, observation_metadata={"mask": "CPAP"})
        ]
    )
    assert ObservationSet.from_json(obs_set, send_config).o2_device == "CPAP"


def test_no_oxygen_status(obs_sets):
    obs = obs_sets["obs-set-08"]
    assert obs.air is Sentinel.MISSING
    assert obs.o2_per_min is Sentinel.MISSING
    assert obs.o2_device == ""


def test_spo2_scale_1(obs_sets):
    assert obs_sets["obs-set-04"].spo2_scale_1.observation_value == 97


def test_ews_total_carries_severity(obs_sets):
    total = obs_sets["obs-set-13"].ews_total
    assert total.observation_string == "7"
    assert total.observation_value == "high"


def test_ews_total_without_score_is_blank(send_config):
    total = ObservationSet.from_json(ObservationSetJson(), send_config).ews_total
    assert total.observation_string == ""
    assert total.observation_value is None


def test_monitoring_frequency_from_send_config(obs_sets):
    assert obs_sets["obs-set-04"].monitoring_frequency == 12
    assert obs_sets["obs-set-13"].monitoring_frequency == 0.5
    assert obs_sets["obs-set-05"].monitoring_frequency == 1


def test_unknown_monitoring_instruction_has_no_frequency(send_config):
    obs = ObservationSet.from_json(ObservationSetJson(monitoring_instruction="hourly"), send_config)
    assert obs.monitoring_frequency == ""


def test_initials(obs_sets):
    assert obs_sets["obs-set-13"].initials == "WM"


def test_nurse_concern_codes(obs_sets):
    assert obs_sets["obs-set-05"].nurse_concern_code == "B"
    assert obs_sets["obs-set-13"].nurse_concern_code == "A, C"
    assert obs_sets["obs-set-04"].nurse_concern_code == ""


def test_unrecognised_nurse_concern(send_config):
    obs_set = ObservationSetJson(
        observations=[Reading(observation_type="nurse_concern", observation_string="Itching")]
    )
    assert ObservationSet.from_json(obs_set, send_config).nurse_concern_code == "?"


@pytest.mark.parametrize(
    "label",
    ["Nausea or vomiting", "nausea/vomiting", "Nausea, vomiting", "NAUSEA OR VOMITING"],
)
def test_canonical_nurse_concern(label):
    assert canonical_nurse_concern(label) == "nausea_vomiting"


def test_entry_readings_dispatch(obs_sets):
    entry = TimelineEntry.of(obs_sets["obs-set-13"])
    assert entry.reading(ChartField.ESCALATION_OF_CARE) == "high_monitoring"
    assert entry.reading(ChartField.INITIALS) == "WM"
    assert entry.reading(ChartField.TOP_SECTION) == ""
    assert entry.reading(ChartField.HEART_RATE).observation_value == 135
    assert entry.reading(ChartField.NURSE_CONCERN) == "A, C"


def test_untimed_set_has_undefined_date(send_config):
    entry = TimelineEntry.of(ObservationSet.from_json(ObservationSetJson(), send_config))
    assert entry.date is None
    assert entry.time is None
