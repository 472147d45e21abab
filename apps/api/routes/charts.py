"""
API route: Chart documents
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Query
from fastapi.responses import Response

from apps.renderer import generate_pdf
from packages.shared import settings
from packages.shared.models import parse_chart_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dhos/v1", tags=["charts"])

LAST_PAGE = 99999
SAMPLE_FILES = {
    "patient": "sample_patient.json",
    "encounter": "sample_encounter.json",
    "observation_sets": "sample_observations.json",
    "location": "sample_location.json",
}


def _pdf_response(body: Any) -> Response:
    started = time.perf_counter()
    request = parse_chart_request(body)
    logger.info("Starting PDF generation")
    pdf, filename = generate_pdf(request)
    logger.info(f"Completed PDF generation in {time.perf_counter() - started:.2f}s ({len(pdf)} bytes)")
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


def parse_page_query(page: str) -> dict[str, int]:
    """'2' selects page 2 only, '3:5' pages 3 to 5 inclusive, '3:' page 3 onwards."""
    first_text, sep, last_text = page.partition(":")
    try:
        first = int(first_text)
    except ValueError:
        first = 0
    if not sep:
        return {"first": first, "last": first}
    try:
        last = int(last_text)
    except ValueError:
        last = LAST_PAGE
    return {"first": first, "last": last}


def load_sample_request(trust: Optional[str] = None) -> dict[str, Any]:
    body: dict[str, Any] = {}
    for key, name in SAMPLE_FILES.items():
        with open(settings.SAMPLE_DIR / name, "r", encoding="utf-8") as f:
            body[key] = json.load(f)
    trustomer = "sample_trustomer_ouh.json" if trust == "ouh" else "sample_trustomer.json"
    with open(settings.SAMPLE_DIR / trustomer, "r", encoding="utf-8") as f:
        body["trustomer"] = json.load(f)
    return body


@router.post("/send_pdf")
def send_pdf(body: Any = Body(None)):
    """Render the posted patient record as a chart document."""
    return _pdf_response(body)


@router.get("/sample_send_pdf")
def sample_send_pdf(
    page: Optional[str] = Query(None, description="Page number, or first:last range"),
    trust: Optional[str] = Query(None),
):
    """Render the bundled sample record, for checking layouts."""
    if not settings.SAMPLE_ENDPOINT_ENABLED:
        raise HTTPException(status_code=404, detail="Not found")
    body = load_sample_request(trust)
    if page:
        body["pages"] = parse_page_query(page)
    logger.debug(f"Running on patient data: {json.dumps(body)}")
    return _pdf_response(body)
