"""Certificate controller: validates requests and maps service results to HTTP responses."""

from __future__ import annotations

import logging
import re

from fastapi import HTTPException, status
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from app.certificates.schemas import (
    CertificateRequest,
    GenerateCertificateRequest,
    GenerateCertificateResponse,
)
from app.certificates.service import CertificateService
from app.exceptions import CertificateError, TemplateError, ValidationError

logger = logging.getLogger(__name__)

# Ids become a single object name; path separators and control characters are refused
_UNSAFE_ID = re.compile(r"[/\\\x00-\x1f\x7f]")


def _handle_domain_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, CertificateError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


def parse_generate_request(
    body: GenerateCertificateRequest,
    service: CertificateService,
) -> CertificateRequest:
    if body.payload is None or not body.id:
        raise ValidationError("Payload ou ID faltando")

    name = body.payload.name
    email = body.payload.email
    if not name or not email:
        raise ValidationError("Nome ou e-mail faltando no payload")

    if body.id in (".", "..") or _UNSAFE_ID.search(body.id):
        raise ValidationError("ID inválido para o nome do certificado")

    return service.build_request(body.id, name, email)


async def generate_certificate(
    body: GenerateCertificateRequest,
    service: CertificateService,
) -> GenerateCertificateResponse:
    logger.info("Received certificate request: %s", body.model_dump(by_alias=True))
    try:
        request = parse_generate_request(body, service)
        url = await service.generate(request)
    except Exception as exc:
        if not isinstance(exc, CertificateError):
            logger.exception("Unexpected error while generating certificate")
        raise _handle_domain_error(exc) from exc
    return GenerateCertificateResponse(ok=True, certificado=url)


def preview_certificate(name: str | None, service: CertificateService) -> Response:
    if not name:
        return PlainTextResponse(
            "Nome faltando para o preview", status_code=status.HTTP_400_BAD_REQUEST,
        )
    try:
        markup = service.preview(name)
    except TemplateError as exc:
        logger.error("Preview render failed: %s", exc)
        return PlainTextResponse(
            "Erro ao gerar o preview do certificado",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return HTMLResponse(markup)
