# app/routers/reports.py
from fastapi import APIRouter, Depends, Query, Response
from datetime import date
from typing import Optional

from ..repositories import (
    DogRepository, LitterRepository, PuppyRepository, EventRepository,
    get_dog_repository, get_litter_repository, get_puppy_repository, get_event_repository,
)
from ..security import require_capability
from ..services.reports import ReportsService, report_to_csv
from ..schemas.dog import DogStatus, Sex
from ..schemas.event import EntityType
from ..schemas.litter import LitterStatus
from ..schemas.puppy import PuppyStatus
from ..schemas.report import ReportFormat, ReportOut

router = APIRouter()

can_view = require_capability("view_reports")

async def get_reports_service(
    dogs: DogRepository = Depends(get_dog_repository),
    litters: LitterRepository = Depends(get_litter_repository),
    puppies: PuppyRepository = Depends(get_puppy_repository),
    events: EventRepository = Depends(get_event_repository),
) -> ReportsService:
    return ReportsService(dogs, litters, puppies, events)

def _respond(name: str, report: dict, format: ReportFormat):
    if format == "csv":
        return Response(
            content=report_to_csv(name, report),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{name}-{date.today().isoformat()}.csv"'},
        )
    return report

def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None

@router.get("/stock", response_model=ReportOut)
async def stock_report(
    status_: Optional[DogStatus] = Query(None, alias="status"),
    sex: Optional[Sex] = None,
    format: ReportFormat = "json",
    current=Depends(can_view),
    service: ReportsService = Depends(get_reports_service),
):
    """Plantel del criadero. `?format=csv` descarga el informe."""
    report = await service.stock(status_.value if status_ else None, sex)
    return _respond("stock", report, format)

@router.get("/litters", response_model=ReportOut)
async def litters_report(
    start: Optional[date] = None,
    end: Optional[date] = None,
    status_: Optional[LitterStatus] = Query(None, alias="status"),
    format: ReportFormat = "json",
    current=Depends(can_view),
    service: ReportsService = Depends(get_reports_service),
):
    report = await service.litters_report(_iso(start), _iso(end), status_.value if status_ else None)
    return _respond("litters", report, format)

@router.get("/puppies", response_model=ReportOut)
async def puppies_report(
    status_: Optional[PuppyStatus] = Query(None, alias="status"),
    format: ReportFormat = "json",
    current=Depends(can_view),
    service: ReportsService = Depends(get_reports_service),
):
    report = await service.puppies_report(status_.value if status_ else None)
    return _respond("puppies", report, format)

@router.get("/health", response_model=ReportOut)
async def health_report(
    start: Optional[date] = None,
    end: Optional[date] = None,
    event_type: Optional[str] = None,
    entity_type: Optional[EntityType] = None,
    format: ReportFormat = "json",
    current=Depends(can_view),
    service: ReportsService = Depends(get_reports_service),
):
    report = await service.health_report(_iso(start), _iso(end), event_type, entity_type)
    return _respond("health", report, format)
