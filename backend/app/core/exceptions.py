class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class InvalidStateError(AppError):
    """Raised when an entity is not in a state that allows the requested transition."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class ValidationFailedError(AppError):
    """Raised when input passes schema parsing but violates a business rule."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ConflictError(AppError):
    """Raised when a staff member cannot take on the requested booking."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class StorageError(AppError):
    """Raised when a transaction fails; the whole operation has been rolled back."""
    def __init__(self, message: str = "The operation could not be completed. No changes were saved."):
        super().__init__(message, status_code=500)
