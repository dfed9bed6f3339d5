"""API endpoints for reconciliation dashboard views."""

import logging
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from ..config import get_settings
from .models import DashboardViews, DateField, Platform, ReportContext
from .report import export_filename
from .service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reconciliation", tags=["reconciliation"])


class ViewsRequestBody(BaseModel):
    """Raw payloads fetched from the reconciliation backend."""
    summary: Dict[str, Any] = Field(..., description="Main-summary response")
    ageing: Optional[Any] = Field(None, description="Ageing analysis response")
    growth: Optional[Any] = Field(None, description="Monthly growth response")


class MergeRequestBody(BaseModel):
    """Two raw snapshots to combine; rate fields come from the primary."""
    primary: Dict[str, Any]
    secondary: Dict[str, Any]


class ExportRequestBody(ViewsRequestBody):
    """Raw payloads plus the context header of the export."""
    start_date: date = Field(..., description="Start of the date range")
    end_date: date = Field(..., description="End of the date range")
    date_field: DateField = Field(default=DateField.SETTLEMENT)
    platform: Platform = Field(default=Platform.FLIPKART)
    active_tab: str = Field(default="summary")


def _service() -> DashboardService:
    return DashboardService(locale=get_settings().locale)


@router.post("/views", response_model=DashboardViews)
async def compute_views(body: ViewsRequestBody):
    """
    Compute every dashboard view from raw payloads.

    Returns provider match rates, settled/pending splits, ageing
    distributions and growth series for the snapshot.
    """
    return _service().build_views(body.summary, ageing=body.ageing, growth=body.growth)


@router.post("/merge")
async def merge_snapshots(body: MergeRequestBody):
    """
    Merge two raw snapshots, e.g. two date windows fetched in parallel.

    Amounts and counts are summed; rate fields are taken from the primary.
    """
    return _service().merge(body.primary, body.secondary)


@router.post("/export")
async def export_report(
    body: ExportRequestBody,
    format: str = Query(default="csv", description="Output format: csv, json, text"),
):
    """
    Compute views and return them as a downloadable report.

    CSV exports are grouped into labelled sections; the file name embeds the
    date field and the date range.
    """
    if body.start_date > body.end_date:
        raise HTTPException(
            status_code=400,
            detail="start_date must not be after end_date"
        )

    if format not in ("csv", "json", "text"):
        raise HTTPException(
            status_code=400,
            detail="format must be one of: csv, json, text"
        )

    context = ReportContext(
        start_date=body.start_date,
        end_date=body.end_date,
        date_field=body.date_field,
        platform=body.platform,
        active_tab=body.active_tab,
    )

    service = _service()
    views = service.build_views(body.summary, ageing=body.ageing, growth=body.growth)
    output = service.render_views(views, context, format=format)

    logger.info(
        f"Exported {body.platform.value} views for {body.start_date} to {body.end_date} as {format}"
    )

    if format == "csv":
        filename = export_filename(context)
        return PlainTextResponse(
            content=output,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    media_type = "application/json" if format == "json" else "text/plain"
    return PlainTextResponse(content=output, media_type=media_type)


@router.get("/health")
async def reconciliation_health():
    """Health check endpoint for the reconciliation views service."""
    return {"status": "healthy", "service": "reconciliation"}
