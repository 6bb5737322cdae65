"""
Error taxonomy for the invoice service.

Every error raised by a pipeline stage derives from InvoiceServiceError and
carries the HTTP status and machine-readable code the API boundary reports.
"""


class InvoiceServiceError(Exception):
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__

    def to_dict(self) -> dict:
        return {"error": self.error_code, "detail": self.message}


class BadRequestError(InvoiceServiceError):
    """Missing or invalid request field"""
    status_code = 400
    error_code = "bad_request"


class UnsupportedModelError(BadRequestError):
    error_code = "unsupported_model"

    def __init__(self, model: str | None, supported: tuple[str, ...] = ()):
        names = " or ".join(f'"{name}"' for name in supported)
        message = f"Invalid model {model!r}. Use {names}" if names else f"Invalid model {model!r}"
        super().__init__(message)
        self.model = model


class DocumentTextError(BadRequestError):
    """The uploaded document could not be read as a PDF"""
    error_code = "unreadable_document"


class ValidationError(BadRequestError):
    """Manual-entry invoice failed schema validation"""
    error_code = "validation_error"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class PayloadTooLargeError(BadRequestError):
    status_code = 413
    error_code = "payload_too_large"


class UnsupportedMediaTypeError(BadRequestError):
    status_code = 415
    error_code = "unsupported_media_type"


class NotFoundError(InvoiceServiceError):
    status_code = 404
    error_code = "not_found"


class UpstreamError(InvoiceServiceError):
    """Document fetch or AI service failure (network, auth, quota, empty reply)"""
    status_code = 502
    error_code = "upstream_error"


class UpstreamTimeoutError(UpstreamError):
    status_code = 504
    error_code = "upstream_timeout"


class MalformedResponseError(InvoiceServiceError):
    """AI response text is not parseable JSON"""
    status_code = 502
    error_code = "malformed_response"


class InvalidStructureError(InvoiceServiceError):
    """AI JSON lacks the top-level vendor/invoice shape"""
    status_code = 422
    error_code = "invalid_structure"


class PersistenceError(InvoiceServiceError):
    status_code = 500
    error_code = "persistence_error"
