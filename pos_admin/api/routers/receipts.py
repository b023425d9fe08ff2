"""
API Routers - printable receipt data.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pos_admin.api.deps import CurrentUser, get_current_user
from pos_admin.application.dto.pos_dto import (
    OutletInfoDTO,
    ReceiptDTO,
    TransactionItemResponseDTO,
    TransactionResponseDTO,
)
from pos_admin.infrastructure.database import get_db
from pos_admin.infrastructure.database.models import Outlet, Product, Transaction, TransactionItem

router = APIRouter(prefix="/api/v1/receipts", tags=["Receipts"])


def load_items(db: Session, transaction_id: UUID) -> list[TransactionItemResponseDTO]:
    """Transaction lines joined with their product names."""
    rows = (
        db.query(TransactionItem, Product.name)
        .join(Product, Product.id == TransactionItem.product_id)
        .filter(TransactionItem.transaction_id == transaction_id)
        .order_by(TransactionItem.created_at)
        .all()
    )
    return [
        TransactionItemResponseDTO(
            id=item.id,
            product_id=item.product_id,
            product_name=name,
            quantity=item.quantity,
            price=item.price,
            total=item.total,
        )
        for item, name in rows
    ]


@router.get("/{transaction_id}", response_model=ReceiptDTO)
def get_receipt(
    transaction_id: UUID,
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Receipt of a transaction; other outlets' receipts are hidden."""
    transaction = db.get(Transaction, transaction_id)
    if not transaction or (
        not current.is_superadmin and transaction.outlet_id != current.outlet_id
    ):
        raise HTTPException(status_code=404, detail="Transaction not found")

    outlet = db.get(Outlet, transaction.outlet_id)
    return ReceiptDTO(
        transaction=TransactionResponseDTO.model_validate(transaction),
        items=load_items(db, transaction.id),
        outlet=OutletInfoDTO.model_validate(outlet),
    )
