"""Flood report endpoints."""

from fastapi import APIRouter, Depends

from floodroute.schemas.report import ReportGridResponse, ReportRequest, ReportResponse
from floodroute.services.session import AdvisorSession, get_advisor

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post("", response_model=ReportResponse)
async def record_report(
    report: ReportRequest,
    advisor: AdvisorSession = Depends(get_advisor),
) -> ReportResponse:
    """Record a flood report at a clicked map point."""
    return await advisor.record_report(report.lat, report.lng)


@router.get("", response_model=ReportGridResponse)
async def get_reports(advisor: AdvisorSession = Depends(get_advisor)) -> ReportGridResponse:
    """Return every grid cell with at least one report."""
    cells = await advisor.store.all()
    return ReportGridResponse(
        precision=advisor.store.precision,
        cell_count=len(cells),
        cells=cells,
    )


@router.delete("")
async def clear_reports(advisor: AdvisorSession = Depends(get_advisor)) -> dict:
    """Clear the local flood memory and any rendered routes."""
    status = await advisor.clear_reports()
    return {"success": True, "status": status}
