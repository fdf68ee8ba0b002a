"""Custom service layer errors."""


class ServiceError(Exception):
    """Base error for service-layer failures."""


class ValidationError(ServiceError):
    """Raised when a business rule validation fails."""


class NotFoundError(ServiceError):
    """Raised when an entity is not found."""


class ConflictError(ServiceError):
    """Raised when a reservation overlaps another one for the same vehicle."""

    def __init__(self, message: str, vehicle_id: int | None = None) -> None:
        super().__init__(message)
        self.vehicle_id = vehicle_id


class TransportError(ServiceError):
    """Raised when the data store cannot be reached or fails mid-request."""


class SessionStateError(ServiceError):
    """Raised when a booking step is requested from the wrong state."""
