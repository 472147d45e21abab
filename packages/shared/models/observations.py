"""
Observation sets, score system changes and the timeline entries built from them.

Every chart column shows one TimelineEntry. An entry wraps exactly one of an
ObservationSet, a ScoreSystemChangeEvent or a GapMarker, and answers the same
questions for each: its date and time, and the value to show for any ChartField.
Entries that are not observation sets answer every metric with their sentinel.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional, Union

from packages.shared.models.enums import (
    SEVERITY_INTERVAL_KEYS,
    ChartField,
    EntryKind,
    MonitoringInstruction,
    ObservationType,
    Sentinel,
)
from packages.shared.models.request import (
    NurseConcern,
    ObservationSetJson,
    OxygenMask,
    Reading,
    ScoreSystemHistoryJson,
    SendConfig,
)
from packages.shared.utils.formatting import (
    format_24hour,
    format_ddmmmyy,
    format_number,
    initials,
    parse_timestamp,
)

DEFAULT_MASK_PERCENT = 21
ROOM_AIR_CODE = "RA"


@dataclass(frozen=True)
class ReadingPair:
    """Two readings charted together (systolic over diastolic)."""
    high: Union[Reading, Sentinel]
    low: Union[Reading, Sentinel]


Slot = Union[Reading, Sentinel]
ChartValue = Union[Sentinel, Reading, ReadingPair, str, int, float, None]


def canonical_nurse_concern(nurse_concern: str) -> str:
    """Collapse a concern label so minor spelling differences still match."""
    text = re.sub(r" or ", " ", nurse_concern, flags=re.IGNORECASE)
    text = re.sub(r"\W*(\w+)\W+", r"\1_", text)
    text = re.sub(r"_$", "", text)
    return text.lower()


def _numeric_or_missing(slot: Slot) -> Union[int, float, str, Sentinel]:
    if isinstance(slot, Sentinel):
        return slot
    if slot.observation_value is None:
        return Sentinel.MISSING
    return slot.observation_value


def _empty_reading() -> Reading:
    return Reading(observation_type="ews_total", observation_string="")


@dataclass(frozen=True)
class ObservationSet:
    """A bundle of readings recorded together at one time."""
    record_time: Optional[datetime]
    readings: Mapping[ObservationType, Slot]
    score_system: str = ""
    spo2_scale: Optional[int] = None
    score_value: Optional[int] = None
    score_severity: Optional[str] = None
    monitoring_instruction: str = ""
    monitoring_frequency: Union[int, float, str] = ""
    initials: str = ""
    oxygen_masks: tuple[OxygenMask, ...] = ()
    nurse_concerns: tuple[NurseConcern, ...] = ()

    @classmethod
    def from_json(cls, obs_set: ObservationSetJson, send_config: SendConfig) -> ObservationSet:
        readings: dict[ObservationType, Slot] = {t: Sentinel.MISSING for t in ObservationType}
        for observation in obs_set.observations:
            try:
                obs_type = ObservationType(observation.observation_type)
            except ValueError:
                continue
            readings[obs_type] = Sentinel.REFUSED if observation.patient_refused else observation

        instruction = obs_set.monitoring_instruction or ""
        frequency: Union[int, float, str] = ""
        try:
            interval_key = SEVERITY_INTERVAL_KEYS[MonitoringInstruction(instruction)]
        except ValueError:
            interval_key = None
        if interval_key is not None:
            interval = getattr(send_config.news2, interval_key)
            if interval is not None:
                frequency = interval

        created_by = obs_set.created_by
        return cls(
            record_time=parse_timestamp(obs_set.record_time),
            readings=readings,
            score_system=obs_set.score_system or "",
            spo2_scale=obs_set.spo2_scale,
            score_value=obs_set.score_value,
            score_severity=obs_set.score_severity,
            monitoring_instruction=instruction,
            monitoring_frequency=frequency,
            initials=initials(created_by.first_name, created_by.last_name) if created_by else "",
            oxygen_masks=tuple(send_config.oxygen_masks),
            nurse_concerns=tuple(send_config.nurse_concern),
        )

    def reading(self, obs_type: ObservationType) -> Slot:
        return self.readings.get(obs_type, Sentinel.MISSING)

    @property
    def systolic_blood_pressure(self) -> Union[int, float, str, Sentinel]:
        return _numeric_or_missing(self.reading(ObservationType.SYSTOLIC_BLOOD_PRESSURE))

    @property
    def diastolic_blood_pressure(self) -> Union[int, float, str, Sentinel]:
        return _numeric_or_missing(self.reading(ObservationType.DIASTOLIC_BLOOD_PRESSURE))

    @property
    def bp(self) -> tuple:
        return (self.systolic_blood_pressure, self.diastolic_blood_pressure)

    @property
    def blood_pressure(self) -> ReadingPair:
        return ReadingPair(
            high=self.reading(ObservationType.SYSTOLIC_BLOOD_PRESSURE),
            low=self.reading(ObservationType.DIASTOLIC_BLOOD_PRESSURE),
        )

    @property
    def spo2_scale_1(self) -> Slot:
        if self.spo2_scale == 1:
            return self.reading(ObservationType.SPO2)
        return Sentinel.MISSING

    @property
    def spo2_scale_2_air(self) -> Slot:
        if self.spo2_scale == 2 and not self.is_oxygen:
            return self.reading(ObservationType.SPO2)
        return Sentinel.MISSING

    @property
    def spo2_scale_2_o2(self) -> Slot:
        if self.spo2_scale == 2 and self.is_oxygen:
            return self.reading(ObservationType.SPO2)
        return Sentinel.MISSING

    @property
    def air(self) -> Union[str, Sentinel]:
        status = self.reading(ObservationType.O2_THERAPY_STATUS)
        if isinstance(status, Sentinel):
            return status
        if status.observation_value == 0:
            return "A"
        return ""

    @property
    def o2_per_min(self) -> Union[str, Sentinel]:
        status = self.reading(ObservationType.O2_THERAPY_STATUS)
        if isinstance(status, Sentinel):
            return status
        value = status.observation_value
        if value is not None and value != 0:
            return format_number(value) if not isinstance(value, str) else value
        return ""

    @property
    def o2_device(self) -> str:
        status = self.reading(ObservationType.O2_THERAPY_STATUS)
        if isinstance(status, Sentinel) or status.observation_metadata is None:
            return ""
        metadata = status.observation_metadata
        mask = metadata.mask or "unknown"
        mapped = next((m for m in self.oxygen_masks if m.name.lower() == mask.lower()), None)
        if mapped is None:
            return mask
        # High flow devices do not always report a percentage.
        percent = metadata.mask_percent if metadata.mask_percent is not None else DEFAULT_MASK_PERCENT
        return mapped.code.replace("{mask_percent}", format_number(percent))

    @property
    def is_oxygen(self) -> bool:
        device = self.o2_device
        return bool(device) and device != ROOM_AIR_CODE

    @property
    def ews_total(self) -> Reading:
        """Score as text, with severity as the value that selects the cell colour."""
        if self.score_value is None:
            return _empty_reading()
        return Reading(
            observation_type="ews_total",
            observation_string=str(self.score_value),
            observation_value=self.score_severity,
        )

    @property
    def nurse_concern_code(self) -> str:
        concern = self.reading(ObservationType.NURSE_CONCERN)
        if isinstance(concern, Sentinel):
            return ""
        text = concern.observation_string or ""
        matched = self._match_concern(text)
        if matched is not None:
            return matched
        if "," in text:
            return ", ".join(self._match_concern(name) or "?" for name in text.split(","))
        return "?"

    def _match_concern(self, name: str) -> Optional[str]:
        wanted = canonical_nurse_concern(name)
        for concern in self.nurse_concerns:
            if canonical_nurse_concern(concern.name) == wanted:
                return concern.code
        return None


@dataclass(frozen=True)
class ScoreSystemChangeEvent:
    """A switch of score system or SpO2 scale; ``changed_time`` is None when synthesized."""
    changed_time: Optional[datetime]
    score_system: str = ""
    spo2_scale: Optional[int] = None
    initials: str = ""

    @classmethod
    def from_json(cls, change: ScoreSystemHistoryJson) -> ScoreSystemChangeEvent:
        changed_by = change.changed_by
        return cls(
            changed_time=parse_timestamp(change.changed_time),
            score_system=change.score_system or "",
            spo2_scale=change.spo2_scale,
            initials=initials(changed_by.first_name, changed_by.last_name) if changed_by else "",
        )


@dataclass(frozen=True)
class GapMarker:
    """No observations were recorded for more than the gap threshold."""
    spo2_scale: Optional[int] = None


_OBSERVATION_ACCESSORS: dict[ChartField, Callable[[ObservationSet], ChartValue]] = {
    ChartField.RESPIRATORY_RATE: lambda o: o.reading(ObservationType.RESPIRATORY_RATE),
    ChartField.SPO2: lambda o: o.reading(ObservationType.SPO2),
    ChartField.SPO2_SCALE_1: lambda o: o.spo2_scale_1,
    ChartField.SPO2_SCALE_2_AIR: lambda o: o.spo2_scale_2_air,
    ChartField.SPO2_SCALE_2_O2: lambda o: o.spo2_scale_2_o2,
    ChartField.AIR: lambda o: o.air,
    ChartField.O2_PER_MIN: lambda o: o.o2_per_min,
    ChartField.O2_DEVICE: lambda o: o.o2_device,
    ChartField.O2_THERAPY_STATUS: lambda o: o.reading(ObservationType.O2_THERAPY_STATUS),
    ChartField.BLOOD_PRESSURE: lambda o: o.blood_pressure,
    ChartField.SYSTOLIC_BLOOD_PRESSURE: lambda o: o.systolic_blood_pressure,
    ChartField.DIASTOLIC_BLOOD_PRESSURE: lambda o: o.diastolic_blood_pressure,
    ChartField.HEART_RATE: lambda o: o.reading(ObservationType.HEART_RATE),
    ChartField.CONSCIOUSNESS_ACVPU: lambda o: o.reading(ObservationType.CONSCIOUSNESS_ACVPU),
    ChartField.TEMPERATURE: lambda o: o.reading(ObservationType.TEMPERATURE),
    ChartField.EWS_TOTAL: lambda o: o.ews_total,
    ChartField.MONITORING_FREQUENCY: lambda o: o.monitoring_frequency,
    ChartField.ESCALATION_OF_CARE: lambda o: o.monitoring_instruction,
    ChartField.NURSE_CONCERN: lambda o: o.nurse_concern_code,
}


@dataclass(frozen=True)
class TimelineEntry:
    kind: EntryKind
    payload: Union[ObservationSet, ScoreSystemChangeEvent, GapMarker]

    @classmethod
    def of(cls, payload: Union[ObservationSet, ScoreSystemChangeEvent, GapMarker]) -> TimelineEntry:
        if isinstance(payload, ObservationSet):
            return cls(EntryKind.OBSERVATION_SET, payload)
        if isinstance(payload, ScoreSystemChangeEvent):
            return cls(EntryKind.SCORE_SYSTEM_CHANGE, payload)
        return cls(EntryKind.NO_READINGS, payload)

    @property
    def sentinel(self) -> Optional[Sentinel]:
        """The sentinel standing in for every metric, None for observation sets."""
        if self.kind is EntryKind.SCORE_SYSTEM_CHANGE:
            return Sentinel.SCORE_SYSTEM_CHANGE
        if self.kind is EntryKind.NO_READINGS:
            return Sentinel.NO_READINGS_FOR_24_HOURS
        return None

    @property
    def effective_time(self) -> Optional[datetime]:
        if isinstance(self.payload, ObservationSet):
            return self.payload.record_time
        if isinstance(self.payload, ScoreSystemChangeEvent):
            return self.payload.changed_time
        return None

    @property
    def score_system(self) -> str:
        if isinstance(self.payload, GapMarker):
            return ""
        return self.payload.score_system

    @property
    def spo2_scale(self) -> Optional[int]:
        return self.payload.spo2_scale

    @property
    def initials(self) -> str:
        if isinstance(self.payload, GapMarker):
            return ""
        return self.payload.initials

    @property
    def date(self) -> Union[str, Sentinel, None]:
        if self.kind is EntryKind.NO_READINGS:
            return Sentinel.NO_READINGS_FOR_24_HOURS
        moment = self.effective_time
        if moment is None:
            return None if self.kind is EntryKind.OBSERVATION_SET else ""
        return format_ddmmmyy(moment)

    @property
    def time(self) -> Union[str, Sentinel, None]:
        if self.kind is EntryKind.NO_READINGS:
            return Sentinel.NO_READINGS_FOR_24_HOURS
        moment = self.effective_time
        if moment is None:
            return None if self.kind is EntryKind.OBSERVATION_SET else ""
        return format_24hour(moment)

    @property
    def bp(self) -> tuple:
        if isinstance(self.payload, ObservationSet):
            return self.payload.bp
        return (self.sentinel, self.sentinel)

    def reading(self, chart_field: ChartField) -> ChartValue:
        if chart_field is ChartField.DATE:
            return self.date
        if chart_field is ChartField.TIME:
            return self.time
        if chart_field is ChartField.INITIALS:
            return self.initials
        if chart_field is ChartField.TOP_SECTION:
            return ""
        if isinstance(self.payload, ObservationSet):
            return _OBSERVATION_ACCESSORS[chart_field](self.payload)
        return self.sentinel
