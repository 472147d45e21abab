"""
Request payload models for the chart endpoint.

These mirror the JSON posted by the clinical platform. Only the top-level
sections are mandatory; everything below them is lenient so that partially
populated records still chart.
"""
from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from packages.shared.errors import RequestValidationError


class Person(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    uuid: Optional[str] = None


class ObservationMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    gcs_eyes: Optional[str] = None
    gcs_motor: Optional[str] = None
    mask: Optional[str] = None
    mask_percent: Optional[Union[int, float]] = None
    patient_position: Optional[str] = None
    uuid: Optional[str] = None


class Reading(BaseModel):
    """One clinical value as recorded."""
    model_config = ConfigDict(frozen=True)

    observation_type: str
    observation_value: Optional[Union[int, float, str]] = None
    observation_string: Optional[str] = None
    observation_unit: Optional[str] = None
    observation_metadata: Optional[ObservationMetadata] = None
    patient_refused: Optional[bool] = None
    score_value: Optional[int] = None
    measured_time: Optional[str] = None
    uuid: Optional[str] = None


class ObservationSetJson(BaseModel):
    record_time: Optional[str] = None
    observations: list[Reading] = Field(default_factory=list)
    score_system: Optional[str] = None
    spo2_scale: Optional[int] = None
    score_value: Optional[int] = None
    score_severity: Optional[str] = None
    score_string: Optional[str] = None
    monitoring_instruction: Optional[str] = None
    time_next_obs_set_due: Optional[str] = None
    uuid: Optional[str] = None
    created_by: Optional[Person] = None


class ScoreSystemHistoryJson(BaseModel):
    changed_time: Optional[str] = ""
    score_system: Optional[str] = None
    spo2_scale: Optional[int] = None
    changed_by: Optional[Person] = None


class PatientJson(BaseModel):
    first_name: str = ""
    last_name: str = ""
    dob: Optional[str] = None
    hospital_number: str = ""
    sex: Optional[str] = None
    nhs_number: Optional[str] = None


class EncounterJson(BaseModel):
    admitted_at: Optional[str] = None
    score_system_history: list[ScoreSystemHistoryJson] = Field(default_factory=list)
    epr_encounter_id: Optional[str] = None


class LocationJson(BaseModel):
    display_name: str = ""
    location_type: Optional[str] = None
    parent: Optional[LocationJson] = None


LocationJson.model_rebuild()


class OxygenMask(BaseModel):
    code: str
    name: str


class NurseConcern(BaseModel):
    code: str
    name: str
    text: str = ""


class EscalationPolicy(BaseModel):
    routine_monitoring: str = ""
    low_monitoring: str = ""
    low_medium_monitoring: str = ""
    medium_monitoring: str = ""
    high_monitoring: str = ""


class News2Config(BaseModel):
    zero_severity_interval_hours: Optional[Union[int, float]] = None
    low_severity_interval_hours: Optional[Union[int, float]] = None
    low_medium_severity_interval_hours: Optional[Union[int, float]] = None
    medium_severity_interval_hours: Optional[Union[int, float]] = None
    high_severity_interval_hours: Optional[Union[int, float]] = None
    escalation_policy: EscalationPolicy = Field(default_factory=EscalationPolicy)


class SendConfig(BaseModel):
    """Customer ("trustomer") configuration for the SEND product."""
    bcp: dict[str, Any] = Field(default_factory=dict)
    news2: News2Config = Field(default_factory=News2Config)
    nurse_concern: list[NurseConcern] = Field(default_factory=list)
    oxygen_masks: list[OxygenMask] = Field(default_factory=list)

    def bcp_string(self, name: str) -> str:
        """Customer override text, or '' when absent or not a string."""
        value = self.bcp.get(name)
        return value if isinstance(value, str) else ""

    def bcp_list(self, name: str) -> list[str] | None:
        value = self.bcp.get(name)
        if isinstance(value, list):
            return value
        return None


class Trustomer(BaseModel):
    send_config: SendConfig


class PageRange(BaseModel):
    first: int = 0
    last: Optional[int] = None


class ChartRequest(BaseModel):
    patient: PatientJson
    encounter: EncounterJson
    observation_sets: list[ObservationSetJson]
    location: LocationJson
    trustomer: Trustomer
    pages: Optional[PageRange] = None

    @property
    def send_config(self) -> SendConfig:
        return self.trustomer.send_config


REQUIRED_SECTIONS = ("patient", "encounter", "observation_sets", "location")


def parse_chart_request(body: Any) -> ChartRequest:
    """Validate a raw JSON body, raising RequestValidationError on any problem."""
    if not isinstance(body, dict):
        raise RequestValidationError(["body must be a JSON object"])

    missing = [name for name in REQUIRED_SECTIONS if body.get(name) is None]
    trustomer = body.get("trustomer")
    if not isinstance(trustomer, dict) or trustomer.get("send_config") is None:
        missing.append("trustomer.send_config")
    if missing:
        raise RequestValidationError(missing)

    try:
        return ChartRequest.model_validate(body)
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise RequestValidationError(problems) from exc
