from .document import DocumentGenerator, generate_pdf, load_layout, page_range
from .geometry import ChartGeometry, ChartSection, ColumnInfo, chart_columns
from .pagination import PAGE_LENGTH, ChartModel, Page, paginate
from .timeline import build_timeline

__all__ = [
    "generate_pdf",
    "load_layout",
    "page_range",
    "DocumentGenerator",
    "ChartModel",
    "Page",
    "paginate",
    "PAGE_LENGTH",
    "build_timeline",
    "ChartGeometry",
    "ChartSection",
    "ColumnInfo",
    "chart_columns",
]
