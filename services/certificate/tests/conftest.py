from collections.abc import Generator
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app.certificates.renderer import TemplateRenderer
from app.certificates.service import CertificateService
from app.config import Settings
from app.dependencies import get_certificate_service
from app.exceptions import DeliveryError
from app.main import create_app

FIXED_NOW = datetime(2024, 6, 5, 14, 30)
BUCKET_URL = "https://s3.us-east-1.amazonaws.com/test-bucket"


class FakePdfGenerator:
    def __init__(self) -> None:
        self.calls: list[str] = []

    async def to_pdf(self, markup: str) -> bytes:
        self.calls.append(markup)
        return b"%PDF-1.4 fake certificate"


class FakeUploader:
    """In-memory bucket keyed like the real uploader with an empty prefix."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.calls: list[str] = []

    async def upload(self, pdf_bytes: bytes, certificate_id: str) -> str:
        key = f"{certificate_id}.pdf"
        self.calls.append(key)
        self.objects[key] = pdf_bytes
        return f"{BUCKET_URL}/{key}"


class FakeNotifier:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sent: list[tuple[str, str]] = []

    async def send(self, to_email: str, attachment_url: str) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((to_email, attachment_url))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        s3_bucket="test-bucket",
        s3_key_prefix="",
        resend_api_key="re_test",
    )


@pytest.fixture
def pdf_generator() -> FakePdfGenerator:
    return FakePdfGenerator()


@pytest.fixture
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def service(
    settings: Settings,
    pdf_generator: FakePdfGenerator,
    uploader: FakeUploader,
    notifier: FakeNotifier,
) -> CertificateService:
    return CertificateService(
        renderer=TemplateRenderer(
            settings.certificate_template_dir, settings.certificate_template_name,
        ),
        pdf_generator=pdf_generator,
        uploader=uploader,
        notifier=notifier,
        date_format=settings.certificate_date_format,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def client(settings: Settings, service: CertificateService) -> Generator[TestClient, None, None]:
    app = create_app(settings)
    app.dependency_overrides[get_certificate_service] = lambda: service
    with TestClient(app) as c:
        yield c


@pytest.fixture
def failing_notifier() -> FakeNotifier:
    return FakeNotifier(error=DeliveryError("Email provider rejected the message (500): boom"))
