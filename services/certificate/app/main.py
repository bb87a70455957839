import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.certificates.pdf_generator import PlaywrightPdfGenerator
from app.certificates.renderer import TemplateRenderer
from app.certificates.router import router as certificates_router
from app.certificates.s3 import S3Uploader
from app.certificates.service import CertificateService
from app.config import Settings
from app.email.resend import ResendNotifier
from shared.middleware.error_handler import (
    error_envelope_middleware,
    http_exception_handler,
    validation_exception_handler,
)
from shared.middleware.request_id import request_id_middleware

logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s: %(message)s")
logger = logging.getLogger(__name__)


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Certificate Service

Issues participation certificates for the Analytics Summit.

* **Generate**: renders the certificate for a participant, prints it to a
  720x385 landscape PDF, uploads it to S3 as `<id>.pdf`, and emails it
  (attachment plus download link) through Resend.
* **Preview**: renders only the certificate HTML, for iterating on the design.

### Error shape
All JSON errors return:
```json
{ "ok": false, "error": "Human-readable message" }
```
Missing fields and malformed JSON return `400`; any pipeline failure returns `500`.
A failure after the upload leaves the PDF in the bucket; resubmitting the same
`id` overwrites it.
"""


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

def get_settings() -> Settings:
    return Settings()


def build_certificate_service(settings: Settings, http_client: httpx.AsyncClient) -> CertificateService:
    return CertificateService(
        renderer=TemplateRenderer(
            settings.certificate_template_dir, settings.certificate_template_name,
        ),
        pdf_generator=PlaywrightPdfGenerator(
            executable_path=settings.pdf_executable_path,
            timeout_ms=settings.pdf_timeout_ms,
        ),
        uploader=S3Uploader.from_settings(settings),
        notifier=ResendNotifier.from_settings(http_client, settings),
        date_format=settings.certificate_date_format,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY is not set; certificate emails will be rejected")

    app.state.http_client = httpx.AsyncClient(timeout=httpx.Timeout(None))
    app.state.certificate_service = build_certificate_service(settings, app.state.http_client)

    yield

    # Shutdown
    await app.state.http_client.aclose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="Certificate Service",
        version="1.0.0",
        description=_DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Middleware (applied in reverse-registration order: last added = outermost)
    app.middleware("http")(error_envelope_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(certificates_router)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="certificate")

    return app


app = create_app()
