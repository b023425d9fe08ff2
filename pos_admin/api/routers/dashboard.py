"""
API Routers - dashboard metrics and charts.
"""

from datetime import date, timedelta
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from pos_admin.api.deps import CurrentUser, get_current_user, require_outlet
from pos_admin.application.dto.pos_dto import HourlySalesDTO, MetricDTO, OutletDailySalesDTO
from pos_admin.domain.services import DashboardService
from pos_admin.domain.value_objects import DateRange
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.mappers import to_sale_record
from pos_admin.infrastructure.database.models import Outlet, Transaction, utcnow

router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])

dashboard = DashboardService()


def _sales(db: Session, outlet_ids: list[UUID], bounds: DateRange):
    rows = (
        db.query(Transaction)
        .filter(
            Transaction.outlet_id.in_(outlet_ids),
            Transaction.created_at >= bounds.start,
            Transaction.created_at <= bounds.end,
        )
        .all()
    )
    return [to_sale_record(t) for t in rows]


@router.get("/metrics", response_model=list[MetricDTO])
def monthly_metrics(outlet_id: UUID = Depends(require_outlet), db: Session = Depends(get_db)):
    """This month against last month: orders, sales, net sales, cancellations."""
    today = utcnow().date()
    this_month = DateRange.for_month(today)
    last_month = DateRange.for_month(today.replace(day=1) - timedelta(days=1))

    metrics = dashboard.monthly_metrics(
        _sales(db, [outlet_id], this_month),
        _sales(db, [outlet_id], last_month),
    )
    return [MetricDTO(**m) for m in metrics]


@router.get("/hourly-sales", response_model=list[HourlySalesDTO])
def hourly_sales(
    day: date | None = Query(None, alias="date"),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    bounds = DateRange.for_day(day or utcnow().date())
    return [HourlySalesDTO(**b) for b in dashboard.hourly_sales(_sales(db, [outlet_id], bounds))]


@router.get("/outlet-sales", response_model=list[OutletDailySalesDTO])
def outlet_sales(
    days: int = Query(7, ge=1, le=31),
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Completed sales per day for each outlet the caller can see."""
    query = db.query(Outlet)
    if not current.is_superadmin:
        query = query.filter(or_(Outlet.owner_id == current.id, Outlet.id == current.outlet_id))
    outlet_names = {o.id: o.name for o in query.order_by(Outlet.name).all()}

    start = utcnow().date() - timedelta(days=days - 1)
    bounds = DateRange(DateRange.start_of_day(start), DateRange.end_of_day(start + timedelta(days=days - 1)))
    sales = _sales(db, list(outlet_names), bounds) if outlet_names else []

    series = dashboard.daily_sales_by_outlet(sales, outlet_names, start, days)
    return [OutletDailySalesDTO(**point) for point in series]
