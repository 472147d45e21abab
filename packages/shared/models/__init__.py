from .enums import (
    ChartField,
    EntryKind,
    FieldType,
    MonitoringInstruction,
    ObservationType,
    PageName,
    PatientField,
    ScoreSystem,
    SectionType,
    Sentinel,
)
from .request import (
    ChartRequest,
    EncounterJson,
    LocationJson,
    NurseConcern,
    ObservationMetadata,
    ObservationSetJson,
    OxygenMask,
    PatientJson,
    Reading,
    ScoreSystemHistoryJson,
    SendConfig,
    parse_chart_request,
)
from .observations import (
    ChartValue,
    GapMarker,
    ObservationSet,
    ReadingPair,
    ScoreSystemChangeEvent,
    TimelineEntry,
)
from .layout import (
    BasePage,
    ChartPageConfig,
    FieldConfig,
    LayoutConfig,
    MessageText,
    SectionConfig,
)
from .patient import PatientModel
