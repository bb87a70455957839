from fastapi import Request

from app.certificates.service import CertificateService
from app.config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_certificate_service(request: Request) -> CertificateService:
    return request.app.state.certificate_service
