"""Certificate domain Pydantic V2 schemas."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Form field labels as they arrive from the registration form
NAME_FIELD = "Nome completo"
EMAIL_FIELD = "Seu e-mail"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CertificatePayload(BaseModel):
    """Participant form answers, keyed by human-readable labels."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str | None = Field(default=None, alias=NAME_FIELD)
    email: str | None = Field(default=None, alias=EMAIL_FIELD)


class GenerateCertificateRequest(BaseModel):
    """Request body for certificate generation. Presence is checked by the controller."""

    payload: CertificatePayload | None = None
    id: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_from_json(cls, value: object) -> object:
        # Falsy ids (0, "") count as missing; other numbers become strings
        if not value and not isinstance(value, bool):
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


@dataclass(frozen=True)
class CertificateRequest:
    """One participant's certificate, alive for a single request."""

    id: str
    name: str
    email: str
    date: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class GenerateCertificateResponse(BaseModel):
    ok: bool = True
    certificado: str


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
