import json
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_APP_DIR = Path(__file__).resolve().parent


def _env_files() -> list[str]:
    """Load .env from backend root (when running from services/certificate) then local .env."""
    base = Path(__file__).resolve().parent.parent.parent.parent  # backend root
    return [str(base / ".env"), ".env"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env_name: str = "development"
    port: int = 3000
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        raw = self.cors_origins.strip()
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
                if isinstance(parsed, list):
                    return [str(o).strip() for o in parsed if str(o).strip()]
            except (json.JSONDecodeError, ValueError):
                pass
        return [x.strip() for x in raw.split(",") if x.strip()]

    # ── AWS / S3 ───────────────────────────────────────────────────────────────
    aws_access_key_id: str = ""
    aws_secret_access_key: str = Field(
        default="",
        validation_alias=AliasChoices("aws_secret_access_key", "aws_access_secret"),
    )
    s3_region: str = "us-east-1"
    s3_bucket: str = "download.metricasboss.com.br"
    # Prepended to "<id>.pdf"; keep the trailing slash.
    s3_key_prefix: str = "summit24/"
    # Public base URL for uploaded objects (CDN or website endpoint). No trailing slash.
    # Empty = path-style S3 URL.
    s3_public_base_url: str = ""

    # ── Resend (transactional email) ───────────────────────────────────────────
    resend_api_key: str = ""
    resend_from_email: str = "prime@metricasboss.com.br"
    email_subject: str = "Agora sim, certificado Analytics Summit"

    # ── Certificate rendering ──────────────────────────────────────────────────
    certificate_template_dir: str = str(_APP_DIR / "templates")
    certificate_template_name: str = "certificate.html"
    certificate_date_format: str = "%m/%d/%Y"
    # Chromium binary override; empty = Playwright's bundled browser.
    pdf_executable_path: str = ""
    pdf_timeout_ms: int = 30_000
