class ShopInventoryError(Exception):
    """Base exception for Print Shop Inventory errors."""

    def __init__(self, message=None, code=None, details=None):
        """Initialize the exception.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message or "An error occurred in the Print Shop Inventory"
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        """String representation of the error."""
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


class ConfigError(ShopInventoryError):
    """Exception raised for configuration errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Configuration error"
        super().__init__(message, code, details)


class StorageError(ShopInventoryError):
    """Exception raised when reading or writing a table fails."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Storage error"
        super().__init__(message, code, details)


class StorageConflictError(StorageError):
    """Exception raised when a table changed since it was read."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Table was modified by another writer"
        super().__init__(message, code or 'CONFLICT', details)


class ValidationError(ShopInventoryError):
    """Exception raised for data validation errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Validation error"
        super().__init__(message, code, details)


class NotFoundError(ShopInventoryError):
    """Exception raised when a requested record is not found."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Record not found"
        super().__init__(message, code, details)


class ProductError(ValidationError):
    """Exception raised for product-related errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Product error"
        super().__init__(message, code, details)


class PlateError(ValidationError):
    """Exception raised for printing plate errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Printing plate error"
        super().__init__(message, code, details)


class ReservationError(ValidationError):
    """Exception raised for reservation errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Reservation error"
        super().__init__(message, code, details)


class CalculationError(ShopInventoryError):
    """Exception raised for calculation errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Calculation error"
        super().__init__(message, code, details)
