from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import TokenUser, get_report_storage, require_permission
from app.core.config import settings
from app.core.logging import get_logger
from app.schemas.reports import ReportOut
from app.services.reports import (
    InvalidReportRequest,
    ReportRequest,
    ReportStorage,
    ReportStorageError,
    ReportType,
    generate_report,
)

logger = get_logger("api.reports")

router = APIRouter(tags=["Reports"])


@router.get("/reports", response_model=ReportOut, response_model_exclude_none=True)
async def get_report(
    report_type: ReportType = Query(default=ReportType.DAILY, alias="type"),
    date: str | None = Query(default=None),
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    include_detailed_reports: bool = Query(default=True, alias="includeDetailedReports"),
    include_top_products: bool = Query(default=True, alias="includeTopProducts"),
    include_damaged_items: bool = Query(default=True, alias="includeDamagedItems"),
    include_expenses: bool = Query(default=True, alias="includeExpenses"),
    include_previous_period: bool = Query(default=True, alias="includePreviousPeriod"),
    current_user: TokenUser = Depends(require_permission("reports:view")),
    storage: ReportStorage = Depends(get_report_storage),
):
    request = ReportRequest(
        report_type=report_type,
        date=date,
        start_date=start_date,
        end_date=end_date,
        include_detailed_reports=include_detailed_reports,
        include_top_products=include_top_products,
        include_damaged_items=include_damaged_items,
        include_expenses=include_expenses,
        include_previous_period=include_previous_period,
    )
    logger.info(
        "report requested by %s: type=%s date=%s range=%s..%s",
        current_user.subject,
        report_type.value,
        date,
        start_date,
        end_date,
    )
    try:
        return await generate_report(
            storage,
            request,
            logger=logger,
            top_products_limit=settings.top_products_limit,
        )
    except InvalidReportRequest as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ReportStorageError:
        logger.exception("report generation failed while loading data")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch report data",
        )
