class BookingServiceError(Exception):
    """Base for every error surfaced to API callers as {"error": message}."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SchemaError(BookingServiceError):
    """Malformed payload: shapes, lengths, formats."""


class BusinessRuleError(BookingServiceError):
    """Well-formed request that breaks a booking rule."""


class ConflictError(BusinessRuleError):
    """Rule violation caused by existing state: overlap, capacity, block."""

    status_code = 409


class PermissionDenied(BookingServiceError):
    status_code = 403


class NotFound(BookingServiceError):
    status_code = 404


class PartialApprovalError(BookingServiceError):
    """Dates chosen for approval are not all part of the booking."""

    status_code = 422


class MailRateLimitError(Exception):
    """The mail provider refused delivery because a sending quota was reached."""
