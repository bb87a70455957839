"""Certificate service: render, PDF conversion, S3 upload, and email delivery.

Pure business logic, no FastAPI imports. Collaborators are injected so the
pipeline can run against fakes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from app.certificates.pdf_generator import PdfGenerator
from app.certificates.renderer import TemplateRenderer
from app.certificates.schemas import CertificateRequest
from app.exceptions import CertificateError

logger = logging.getLogger(__name__)


class Uploader(Protocol):
    async def upload(self, pdf_bytes: bytes, certificate_id: str) -> str: ...


class Notifier(Protocol):
    async def send(self, to_email: str, attachment_url: str) -> None: ...


class CertificateService:
    def __init__(
        self,
        renderer: TemplateRenderer,
        pdf_generator: PdfGenerator,
        uploader: Uploader,
        notifier: Notifier,
        date_format: str = "%m/%d/%Y",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.renderer = renderer
        self.pdf_generator = pdf_generator
        self.uploader = uploader
        self.notifier = notifier
        self.date_format = date_format
        self.clock = clock

    def today(self) -> str:
        return self.clock().strftime(self.date_format)

    def build_request(self, certificate_id: str, name: str, email: str) -> CertificateRequest:
        return CertificateRequest(id=certificate_id, name=name, email=email, date=self.today())

    def preview(self, name: str) -> str:
        """Render the certificate markup only. No PDF, upload, or email."""
        return self.renderer.render(name=name, date=self.today())

    async def generate(self, request: CertificateRequest) -> str:
        """Run the full pipeline and return the public URL of the uploaded PDF.

        Any stage failure aborts the run. An upload is not rolled back when the
        email step fails afterwards; the PDF stays reachable at its URL.
        """
        try:
            markup = self.renderer.render(name=request.name, date=request.date)
            pdf_bytes = await self.pdf_generator.to_pdf(markup)
            url = await self.uploader.upload(pdf_bytes, request.id)
            logger.info("Certificate %s uploaded to %s", request.id, url)
            await self.notifier.send(request.email, url)
        except CertificateError as exc:
            logger.error(
                "Certificate %s failed at %s stage: %s", request.id, exc.stage, exc,
            )
            raise

        logger.info("Certificate email sent for %s", request.id)
        return url
