"""Domain exception classes for the certificate service.

These are raised by service-layer code and caught by controllers
to map to appropriate HTTP responses.
"""


class CertificateError(Exception):
    """Base class for every pipeline failure. ``stage`` names where it happened."""

    stage: str = "pipeline"


class ValidationError(CertificateError):
    """Raised when a required request field is missing or unusable."""

    stage = "validation"


class TemplateError(CertificateError):
    """Raised when the certificate template is missing, malformed, or fails to render."""

    stage = "render"


class RenderError(CertificateError):
    """Raised when HTML to PDF conversion cannot start, times out, or yields nothing."""

    stage = "document"


class StorageError(CertificateError):
    """Raised on any object store transport, auth, or service failure."""

    stage = "upload"

    def __init__(self, key: str, cause: Exception):
        self.key = key
        self.cause = cause
        super().__init__(f"Upload of {key} failed: {cause}")


class DeliveryError(CertificateError):
    """Raised when the certificate email cannot be sent."""

    stage = "notify"


class FetchError(DeliveryError):
    """Raised when the uploaded PDF cannot be fetched back for attaching."""

    def __init__(self, url: str, detail: str = ""):
        self.url = url
        super().__init__(f"Could not fetch attachment from {url}: {detail}")


class SuppressedRecipientError(DeliveryError):
    """Raised when the email provider has the recipient on its suppression list."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Recipient is on the provider suppression list: {email}")
