from enum import Enum


class Sentinel(str, Enum):
    """Special values that occupy a chart slot instead of a real reading."""
    REFUSED = "refused"
    SCORE_SYSTEM_CHANGE = "score_system_change"
    MISSING = "missing"
    NO_READINGS_FOR_24_HOURS = "no_obs"


class EntryKind(str, Enum):
    OBSERVATION_SET = "observation_set"
    SCORE_SYSTEM_CHANGE = "score_system_change"
    NO_READINGS = "no_readings"


class ScoreSystem(str, Enum):
    NEWS2 = "news2"
    MEOWS = "meows"


class MonitoringInstruction(str, Enum):
    ROUTINE = "routine_monitoring"
    LOW = "low_monitoring"
    LOW_MEDIUM = "low_medium_monitoring"
    MEDIUM = "medium_monitoring"
    HIGH = "high_monitoring"


class ObservationType(str, Enum):
    SYSTOLIC_BLOOD_PRESSURE = "systolic_blood_pressure"
    DIASTOLIC_BLOOD_PRESSURE = "diastolic_blood_pressure"
    TEMPERATURE = "temperature"
    CONSCIOUSNESS_ACVPU = "consciousness_acvpu"
    SPO2 = "spo2"
    RESPIRATORY_RATE = "respiratory_rate"
    HEART_RATE = "heart_rate"
    O2_THERAPY_STATUS = "o2_therapy_status"
    NURSE_CONCERN = "nurse_concern"


class SectionType(str, Enum):
    SIMPLE = "simple"
    BANDS = "bands"
    DOT = "dot"
    CANDLE = "candle"
    BLANK = "blank"


class FieldType(str, Enum):
    TEXT = "text"
    HTML = "html"
    SVG = "svg"
    TABLE = "table"


class PageName(str, Enum):
    NEWS2 = "news2"
    MEOWS = "meows"
    COVER_PAGE = "cover_page"
    THRESHOLD_4COLS = "threshold_4cols"
    THRESHOLD_5COLS = "threshold_5cols"
    BLANK_CHART_NEWS2 = "blank_chart_news2"
    BLANK_CHART_MEOWS = "blank_chart_meows"


# Severity interval keys in the send config, per monitoring instruction.
SEVERITY_INTERVAL_KEYS: dict[MonitoringInstruction, str] = {
    MonitoringInstruction.ROUTINE: "zero_severity_interval_hours",
    MonitoringInstruction.LOW: "low_severity_interval_hours",
    MonitoringInstruction.LOW_MEDIUM: "low_medium_severity_interval_hours",
    MonitoringInstruction.MEDIUM: "medium_severity_interval_hours",
    MonitoringInstruction.HIGH: "high_severity_interval_hours",
}


class ChartField(str, Enum):
    """Values a chart section can display for one timeline entry."""
    DATE = "date"
    TIME = "time"
    INITIALS = "initials"
    TOP_SECTION = "top_section"
    RESPIRATORY_RATE = "respiratory_rate"
    SPO2 = "spo2"
    SPO2_SCALE_1 = "spo2_scale_1"
    SPO2_SCALE_2_AIR = "spo2_scale_2_air"
    SPO2_SCALE_2_O2 = "spo2_scale_2_o2"
    AIR = "air"
    O2_PER_MIN = "o2_per_min"
    O2_DEVICE = "o2_device"
    O2_THERAPY_STATUS = "o2_therapy_status"
    BLOOD_PRESSURE = "blood_pressure"
    SYSTOLIC_BLOOD_PRESSURE = "systolic_blood_pressure"
    DIASTOLIC_BLOOD_PRESSURE = "diastolic_blood_pressure"
    HEART_RATE = "heart_rate"
    CONSCIOUSNESS_ACVPU = "consciousness_acvpu"
    TEMPERATURE = "temperature"
    EWS_TOTAL = "ews_total"
    MONITORING_FREQUENCY = "monitoring_frequency"
    ESCALATION_OF_CARE = "escalation_of_care"
    NURSE_CONCERN = "nurse_concern"


class PatientField(str, Enum):
    """Values a text, html or svg field on a page can show."""
    TEXT = "text"
    FULL_NAME = "full_name"
    FULL_NAME_LONG = "full_name_long"
    GENDER = "gender"
    SHORT_GENDER = "short_gender"
    NAME_WITH_GENDER = "name_with_gender"
    DOB = "dob"
    AGE = "age"
    DOB_WITH_AGE = "dob_with_age"
    HOSPITAL_NUMBER = "hospital_number"
    NHS_NUMBER = "nhs_number"
    ADMISSION_DATE = "admission_date"
    WARD = "ward"
    PAGE_NUMBER = "page_number"
    PAGE_DATE = "page_date"
    ROUTINE_MONITORING = "routine_monitoring"
    LOW_MONITORING = "low_monitoring"
    LOW_MEDIUM_MONITORING = "low_medium_monitoring"
    MEDIUM_MONITORING = "medium_monitoring"
    HIGH_MONITORING = "high_monitoring"
    ZERO_SEVERITY_INTERVAL = "zero_severity_interval"
    LOW_SEVERITY_INTERVAL = "low_severity_interval"
    LOW_MEDIUM_SEVERITY_INTERVAL = "low_medium_severity_interval"
    MEDIUM_SEVERITY_INTERVAL = "medium_severity_interval"
    HIGH_SEVERITY_INTERVAL = "high_severity_interval"
    SVG_LOGO = "svg_logo"
    NURSE_CONCERN = "nurse_concern"
