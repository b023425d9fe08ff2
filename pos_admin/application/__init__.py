"""Application layer - Use cases and DTOs."""

from pos_admin.application.dto.pos_dto import (
    CheckoutRequestDTO,
    CheckoutResponseDTO,
    ProductResponseDTO,
    ReceiptDTO,
    SalesReportDTO,
    TransactionResponseDTO,
)
