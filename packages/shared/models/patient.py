"""
Displayable patient, encounter and location values for page fields.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Optional

from packages.shared import settings
from packages.shared.models.enums import PatientField
from packages.shared.models.request import (
    EncounterJson,
    LocationJson,
    NurseConcern,
    PatientJson,
    SendConfig,
)
from packages.shared.utils.formatting import (
    SNOMED_FEMALE,
    SNOMED_INDETERMINATE,
    SNOMED_MALE,
    SNOMED_WARD,
    format_dmy,
    format_nhs_number,
    parse_date,
    parse_timestamp,
    to_display_tz,
    word_trim,
)

FULL_NAME_LENGTH = 64
FULL_NAME_LONG_LENGTH = 102

_GENDER = {
    SNOMED_MALE: ("Male", "M"),
    SNOMED_FEMALE: ("Female", "F"),
    SNOMED_INDETERMINATE: ("Indeterminate", "I"),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PatientModel:
    def __init__(
        self,
        patient: PatientJson,
        encounter: EncounterJson,
        location: LocationJson,
        send_config: SendConfig,
        customer_code: str | None = None,
    ):
        self.patient = patient
        self.encounter = encounter
        self.location = location
        self.send_config = send_config
        self.customer_code = customer_code
        self.nurse_concern: list[NurseConcern] = sorted(send_config.nurse_concern, key=lambda c: c.code)
        self.page_number_callback: Optional[Callable[[], int]] = None

        self._dob = parse_date(patient.dob)
        self._admitted_at = parse_timestamp(encounter.admitted_at)
        self.epr_encounter_id = encounter.epr_encounter_id or ""

        self._accessors: dict[PatientField, Callable[[], str]] = {
            PatientField.TEXT: lambda: "",
            PatientField.FULL_NAME: self.full_name,
            PatientField.FULL_NAME_LONG: self.full_name_long,
            PatientField.GENDER: self.gender,
            PatientField.SHORT_GENDER: self.short_gender,
            PatientField.NAME_WITH_GENDER: self.name_with_gender,
            PatientField.DOB: self.dob,
            PatientField.AGE: self.age,
            PatientField.DOB_WITH_AGE: self.dob_with_age,
            PatientField.HOSPITAL_NUMBER: lambda: self.hospital_number,
            PatientField.NHS_NUMBER: self.nhs_number,
            PatientField.ADMISSION_DATE: self.admission_date,
            PatientField.WARD: self.ward,
            PatientField.PAGE_NUMBER: self.page_number,
            PatientField.PAGE_DATE: self.page_date,
            PatientField.ROUTINE_MONITORING: lambda: self._escalation("routine_monitoring"),
            PatientField.LOW_MONITORING: lambda: self._escalation("low_monitoring"),
            PatientField.LOW_MEDIUM_MONITORING: lambda: self._escalation("low_medium_monitoring"),
            PatientField.MEDIUM_MONITORING: lambda: self._escalation("medium_monitoring"),
            PatientField.HIGH_MONITORING: lambda: self._escalation("high_monitoring"),
            PatientField.ZERO_SEVERITY_INTERVAL: lambda: self._interval("zero_severity_interval"),
            PatientField.LOW_SEVERITY_INTERVAL: lambda: self._interval("low_severity_interval"),
            PatientField.LOW_MEDIUM_SEVERITY_INTERVAL: lambda: self._interval("low_medium_severity_interval"),
            PatientField.MEDIUM_SEVERITY_INTERVAL: lambda: self._interval("medium_severity_interval"),
            PatientField.HIGH_SEVERITY_INTERVAL: lambda: self._interval("high_severity_interval"),
            PatientField.SVG_LOGO: self.svg_logo,
            PatientField.NURSE_CONCERN: lambda: "",
        }

    def get_field(self, name: PatientField) -> str:
        return self._accessors[name]()

    @property
    def hospital_number(self) -> str:
        return self.patient.hospital_number

    def _display_name(self) -> str:
        return f"{self.patient.last_name.upper()}, {self.patient.first_name}"

    def full_name(self) -> str:
        return word_trim(self._display_name(), FULL_NAME_LENGTH)

    def full_name_long(self) -> str:
        return word_trim(self._display_name(), FULL_NAME_LONG_LENGTH)

    def gender(self) -> str:
        # The page label says "Gender" but the payload carries sex.
        return _GENDER.get(self.patient.sex or "", ("Unknown", "U"))[0]

    def short_gender(self) -> str:
        return _GENDER.get(self.patient.sex or "", ("Unknown", "U"))[1]

    def name_with_gender(self) -> str:
        return f"{self.full_name()} ({self.short_gender()})"

    def dob(self) -> str:
        if self._dob is None:
            return ""
        return format_dmy(self._dob)

    def age(self) -> str:
        if self._dob is None:
            return ""
        today = to_display_tz(_now()).date()
        return str(age_on(self._dob, today))

    def dob_with_age(self) -> str:
        if self._dob is None:
            return ""
        return f"{self.dob()} ({self.age()}y)"

    def nhs_number(self) -> str:
        return format_nhs_number(self.patient.nhs_number)

    def admission_date(self) -> str:
        if self._admitted_at is None:
            return ""
        return format_dmy(self._admitted_at)

    def ward(self) -> str:
        location = self.location
        while location.location_type != SNOMED_WARD and location.parent is not None:
            location = location.parent
        return location.display_name

    def page_number(self) -> str:
        number = self.page_number_callback() if self.page_number_callback else 0
        return str(number)

    def page_date(self) -> str:
        local = to_display_tz(_now())
        return f"Document created on {local.day:02d}/{local.month:02d}/{local.year} at {local.hour:02d}:{local.minute:02d}"

    def _escalation(self, name: str) -> str:
        return self.send_config.bcp_string(name) or getattr(self.send_config.news2.escalation_policy, name)

    def _interval(self, name: str) -> str:
        override = self.send_config.bcp_string(name)
        if override:
            return override
        hours = getattr(self.send_config.news2, f"{name}_hours")
        return "" if hours is None else f"{hours:g}"

    def svg_logo(self) -> str:
        logo = settings.CONFIG_DIR / "logos" / f"{self.customer_code}.svg"
        if logo.is_file():
            return str(logo)
        return str(settings.CONFIG_DIR / "logos" / "DEFAULT.svg")


def age_on(dob: date, today: date) -> int:
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age
