"""
API Routers - sales reports and CSV export.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from pos_admin.api.deps import require_outlet, require_permission
from pos_admin.application.dto.pos_dto import (
    SalesReportDTO,
    SalesSummaryDTO,
    TransactionResponseDTO,
)
from pos_admin.core.security import Permission
from pos_admin.domain.services import SalesReportService
from pos_admin.domain.value_objects import DateRange, ReportRange, TransactionStatus
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.mappers import to_sale_record
from pos_admin.infrastructure.database.models import Transaction, utcnow

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])

reports = SalesReportService()


def _completed_sales(
    db: Session,
    outlet_id: UUID,
    bounds: DateRange,
) -> list[Transaction]:
    query = db.query(Transaction).filter(
        Transaction.outlet_id == outlet_id,
        Transaction.status == TransactionStatus.COMPLETED.value,
    )
    if bounds.start is not None:
        query = query.filter(Transaction.created_at >= bounds.start)
    if bounds.end is not None:
        query = query.filter(Transaction.created_at <= bounds.end)
    return query.order_by(Transaction.created_at.desc()).all()


@router.get("/sales", response_model=SalesReportDTO)
def sales_report(
    range_: ReportRange = Query(ReportRange.TODAY, alias="range"),
    start_date: date | None = None,
    end_date: date | None = None,
    _=Depends(require_permission(Permission.REPORT_VIEW)),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    """
    Completed sales of the outlet for a date range, newest first.

    For ``custom`` a missing bound leaves that side of the range open.
    """
    bounds = DateRange.for_preset(range_, utcnow().date(), start_date, end_date)
    rows = _completed_sales(db, outlet_id, bounds)
    summary = reports.summarize(map(to_sale_record, rows))

    return SalesReportDTO(
        range=range_.value,
        start=bounds.start,
        end=bounds.end,
        summary=SalesSummaryDTO.model_validate(summary),
        transactions=[TransactionResponseDTO.model_validate(t) for t in rows],
    )


@router.get("/sales.csv")
def export_sales_csv(
    range_: ReportRange = Query(ReportRange.TODAY, alias="range"),
    start_date: date | None = None,
    end_date: date | None = None,
    _=Depends(require_permission(Permission.REPORT_EXPORT)),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    today = utcnow().date()
    bounds = DateRange.for_preset(range_, today, start_date, end_date)
    rows = _completed_sales(db, outlet_id, bounds)
    if not rows:
        raise HTTPException(status_code=404, detail="No transactions to export")

    filename = reports.export_filename(today)
    return Response(
        content=reports.to_csv(map(to_sale_record, rows)),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
