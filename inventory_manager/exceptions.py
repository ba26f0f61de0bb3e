class InventoryError(Exception):
    """Base exception for Inventory Manager errors.

    Attributes:
        message: Human readable message
        code: Optional machine readable code, e.g. 'insufficient_stock'
        details: Optional dict with field errors or the ids involved
    """

    default_message = "An error occurred in the Inventory Manager"

    def __init__(self, message=None, code=None, details=None):
        self.message = message or self.default_message
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self):
        """Convert the exception to a dictionary."""
        error_dict = {
            'error': self.__class__.__name__,
            'message': self.message,
        }

        if self.code:
            error_dict['code'] = self.code

        if self.details:
            error_dict['details'] = self.details

        return error_dict


class ConfigError(InventoryError):
    """Invalid or missing configuration."""
    default_message = "Configuration error"


class DatabaseError(InventoryError):
    """Database connection, query or procedure failure."""
    default_message = "Database error"


class ValidationError(InventoryError):
    """Rejected input; details maps field names to messages."""
    default_message = "Validation error"


class NotFoundError(InventoryError):
    """A requested record does not exist."""
    default_message = "Resource not found"


class ProductError(InventoryError):
    default_message = "Product error"


class SaleError(InventoryError):
    default_message = "Sale error"


class PurchaseError(InventoryError):
    default_message = "Purchase error"


class ProductionError(InventoryError):
    default_message = "Production error"


class WastageError(InventoryError):
    default_message = "Wastage error"
