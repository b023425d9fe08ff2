"""
API Routers - daily cash position, incomes and expenses.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from pos_admin.api.deps import CurrentUser, require_outlet, require_permission
from pos_admin.application.dto.pos_dto import (
    CashCategoriesDTO,
    CashFlowCreateDTO,
    CashFlowResponseDTO,
    CashSummaryDTO,
)
from pos_admin.core.logging_config import get_logger
from pos_admin.core.security import Permission
from pos_admin.domain.services import CashFlowService
from pos_admin.domain.value_objects import CashFlowType, DateRange
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.mappers import to_cash_flow, to_sale_record
from pos_admin.infrastructure.database.models import Expense, Income, Transaction, utcnow

router = APIRouter(prefix="/api/v1/cash", tags=["Cash Flow"])

logger = get_logger("cash")

cash_flows = CashFlowService()


@router.get("/categories", response_model=CashCategoriesDTO)
def list_categories():
    return CashCategoriesDTO(
        income=cash_flows.categories_for(CashFlowType.INCOME),
        expense=cash_flows.categories_for(CashFlowType.EXPENSE),
    )


@router.get("/summary", response_model=CashSummaryDTO)
def cash_summary(
    day: date | None = Query(None, alias="date"),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    """Sales, incomes and expenses of one day; defaults to today."""
    day = day or utcnow().date()
    bounds = DateRange.for_day(day)

    sales = (
        db.query(Transaction)
        .filter(
            Transaction.outlet_id == outlet_id,
            Transaction.created_at >= bounds.start,
            Transaction.created_at <= bounds.end,
        )
        .all()
    )
    incomes = db.query(Income).filter(Income.outlet_id == outlet_id, Income.date == day).all()
    expenses = db.query(Expense).filter(Expense.outlet_id == outlet_id, Expense.date == day).all()

    summary = cash_flows.summarize(
        map(to_sale_record, sales),
        map(to_cash_flow, incomes),
        map(to_cash_flow, expenses),
    )
    return CashSummaryDTO(
        date=day,
        total_sales=summary.total_sales,
        cash_sales=summary.cash_sales,
        total_income=summary.total_income,
        total_expenses=summary.total_expenses,
        net_cash=summary.net_cash,
        flows=[CashFlowResponseDTO.model_validate(f) for f in summary.flows],
    )


@router.post("/flows", response_model=CashFlowResponseDTO, status_code=status.HTTP_201_CREATED)
def record_cash_flow(
    dto: CashFlowCreateDTO,
    current: CurrentUser = Depends(require_permission(Permission.CASH_RECORD)),
    outlet_id: UUID = Depends(require_outlet),
    db: Session = Depends(get_db),
):
    cash_flows.validate_category(dto.type, dto.category)

    model = Income if dto.type == CashFlowType.INCOME else Expense
    row = model(
        outlet_id=outlet_id,
        user_id=current.id,
        amount=dto.amount,
        category=dto.category,
        description=dto.description.strip(),
        date=dto.date or utcnow().date(),
    )
    db.add(row)
    db.commit()
    db.refresh(row)

    logger.info(
        "cash_flow_recorded",
        extra={"type": dto.type.value, "amount": str(dto.amount), "category": dto.category},
    )
    return CashFlowResponseDTO.model_validate(to_cash_flow(row))
