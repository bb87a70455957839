"""Certificate router: generation pipeline and markup preview."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.certificates import controller
from app.certificates.schemas import (
    ErrorResponse,
    GenerateCertificateRequest,
    GenerateCertificateResponse,
)
from app.certificates.service import CertificateService
from app.dependencies import get_certificate_service

router = APIRouter(tags=["Certificates"])


@router.post(
    "/generate",
    response_model=GenerateCertificateResponse,
    summary="Generate and email a certificate",
    description="Renders the certificate for the participant in `payload`, converts it "
    "to a 720x385 PDF, uploads it as `<id>.pdf`, and emails it with a download link. "
    "Returns 400 when `payload`, `id`, name, or email is missing; 500 when any "
    "pipeline stage fails (the PDF may already be uploaded).",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_certificate(
    body: GenerateCertificateRequest,
    service: CertificateService = Depends(get_certificate_service),
) -> GenerateCertificateResponse:
    return await controller.generate_certificate(body, service)


@router.get(
    "/preview",
    response_class=Response,
    summary="Preview certificate markup",
    description="Renders the certificate HTML for `name` with today's date. "
    "No PDF, upload, or email.",
)
async def preview_certificate(
    name: str | None = Query(default=None),
    service: CertificateService = Depends(get_certificate_service),
) -> Response:
    return controller.preview_certificate(name, service)
