"""
Typed exception hierarchy for the POS admin service.

Every error carries a machine-readable ``code`` and the HTTP ``status_code``
the API layer answers with. Structured attributes (product id, stock level,
...) are kept on the instance so handlers and logs do not parse messages.

    PosAdminError
    |
    +-- AuthenticationError (401)
    |   +-- InvalidCredentialsError
    |   +-- AccountLockedError
    |   +-- InactiveAccountError
    |   +-- InvalidTokenError
    |
    +-- PermissionDeniedError (403)
    +-- NotFoundError (404)
    +-- ConflictError (409)
    |   +-- EmailAlreadyRegisteredError
    |
    +-- BusinessRuleError (400)
        +-- OutOfStockError
        +-- StockLimitError
        +-- InsufficientStockError
        +-- EmptyCartError
        +-- NoOutletAssignedError
        +-- InvalidCategoryError
        +-- PasswordPolicyError
"""

from datetime import datetime


class PosAdminError(Exception):
    code: str = "POS_ADMIN_ERROR"
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthenticationError(PosAdminError):
    code = "AUTHENTICATION_FAILED"
    status_code = 401


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"

    def __init__(self):
        super().__init__("Invalid credentials")


class AccountLockedError(AuthenticationError):
    code = "ACCOUNT_LOCKED"

    def __init__(self, locked_until: datetime):
        self.locked_until = locked_until
        super().__init__("Account locked")


class InactiveAccountError(AuthenticationError):
    code = "ACCOUNT_INACTIVE"

    def __init__(self):
        super().__init__("Account is inactive")


class InvalidTokenError(AuthenticationError):
    code = "INVALID_TOKEN"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class PermissionDeniedError(PosAdminError):
    code = "PERMISSION_DENIED"
    status_code = 403

    def __init__(self, message: str = "You don't have permission to perform this action"):
        super().__init__(message)


class NotFoundError(PosAdminError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id: object = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class ConflictError(PosAdminError):
    code = "CONFLICT"
    status_code = 409


class EmailAlreadyRegisteredError(ConflictError):
    code = "EMAIL_ALREADY_REGISTERED"

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email is already registered")


class BusinessRuleError(PosAdminError):
    code = "BUSINESS_RULE_VIOLATION"
    status_code = 400


class OutOfStockError(BusinessRuleError):
    code = "OUT_OF_STOCK"

    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f"{product_name} is out of stock")


class StockLimitError(BusinessRuleError):
    code = "STOCK_LIMIT"

    def __init__(self, product_name: str, available: int):
        self.product_name = product_name
        self.available = available
        super().__init__(f"Only {available} items available")


class InsufficientStockError(BusinessRuleError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}: {available} available, {requested} requested"
        )


class EmptyCartError(BusinessRuleError):
    code = "EMPTY_CART"

    def __init__(self):
        super().__init__("Add items to cart before processing payment")


class NoOutletAssignedError(BusinessRuleError):
    code = "NO_OUTLET_ASSIGNED"

    def __init__(self):
        super().__init__("User not authenticated or no outlet assigned")


class InvalidCategoryError(BusinessRuleError):
    code = "INVALID_CATEGORY"

    def __init__(self, category: str, allowed: list[str]):
        self.category = category
        self.allowed = allowed
        super().__init__(f"Invalid category '{category}'")


class PasswordPolicyError(BusinessRuleError):
    code = "PASSWORD_POLICY"
