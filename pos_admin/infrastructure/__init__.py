"""Infrastructure layer."""

from pos_admin.infrastructure.database import SessionLocal, get_db, init_db
from pos_admin.infrastructure.database.models import (
    AuthSession,
    AuthUser,
    Expense,
    Income,
    Outlet,
    PasswordResetToken,
    Product,
    ProductCategory,
    Profile,
    StockMovement,
    Transaction,
    TransactionItem,
)
