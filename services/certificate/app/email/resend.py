"""
Resend transactional email client: async httpx REST calls.

Unlike fire-and-forget notification mail, a certificate email is the product
of the request, so every failure is raised to the caller. No retries here.
"""
from __future__ import annotations

import base64
import html
import logging

import httpx

from app.config import Settings
from app.exceptions import DeliveryError, FetchError, SuppressedRecipientError

logger = logging.getLogger(__name__)
_RESEND_URL = "https://api.resend.com/emails"

ATTACHMENT_FILENAME = "certificate.pdf"
ATTACHMENT_CONTENT_TYPE = "application/pdf"


def certificate_email_html(attachment_url: str) -> str:
    return (
        "<!DOCTYPE html>"
        "<html><head><meta charset='UTF-8'>"
        "<title>Analytics Summit 2024 - Certificado de Participação</title>"
        "<style>body{font-family:Arial,sans-serif;line-height:1.6;margin:0;padding:0}"
        "h1{color:#333}p{color:#555}</style>"
        "</head><body>"
        "<h1>O Analytics Summit 2024 foi incrível!</h1>"
        "<p>Obrigado pela sua participação!</p>"
        "<p>Neste e-mail está o seu certificado.</p>"
        "<p>Fique à vontade para compartilhar no Linkedin, Instagram e qualquer rede social.</p>"
        f"<p>É só usar o <a href='{html.escape(attachment_url, quote=True)}'>link</a>.</p>"
        "<p>Não esquece de marcar a Métricas Boss, hein 😎</p>"
        "<p>Obs: Em breve, todas as palestras estarão disponíveis na Métricas Boss Prime.</p>"
        "<p>Até a próxima!</p>"
        "</body></html>"
    )


def _is_suppression(body: dict) -> bool:
    text = f"{body.get('name', '')} {body.get('message', '')}".lower()
    return "suppress" in text


class ResendNotifier:
    """Fetches the uploaded PDF back and mails it to the participant."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        from_email: str,
        subject: str,
    ) -> None:
        self._client = client
        self.api_key = api_key
        self.from_email = from_email
        self.subject = subject

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient, settings: Settings) -> ResendNotifier:
        return cls(
            client,
            api_key=settings.resend_api_key,
            from_email=settings.resend_from_email,
            subject=settings.email_subject,
        )

    async def fetch_attachment(self, url: str) -> bytes:
        try:
            r = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise FetchError(url, str(exc)) from exc
        if not r.is_success:
            raise FetchError(url, f"HTTP {r.status_code}")
        return r.content

    def _payload(self, to_email: str, attachment_url: str, content: str) -> dict:
        return {
            "from": self.from_email,
            "to": [to_email],
            "subject": self.subject,
            "html": certificate_email_html(attachment_url),
            "attachments": [
                {
                    "filename": ATTACHMENT_FILENAME,
                    "content": content,
                    "content_type": ATTACHMENT_CONTENT_TYPE,
                    "disposition": "attachment",
                }
            ],
        }

    async def send(self, to_email: str, attachment_url: str) -> None:
        """Send the certificate email. Raises DeliveryError (or a subtype) on failure."""
        pdf_bytes = await self.fetch_attachment(attachment_url)
        content = base64.b64encode(pdf_bytes).decode("ascii")

        try:
            r = await self._client.post(
                _RESEND_URL,
                json=self._payload(to_email, attachment_url, content),
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as exc:
            logger.error("Resend request failed: %s", exc)
            raise DeliveryError(f"Email provider request failed: {exc}") from exc

        if r.status_code >= 400:
            try:
                body = r.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            if _is_suppression(body):
                logger.info("Recipient %s is on the Resend suppression list", to_email)
                raise SuppressedRecipientError(to_email)
            logger.error("Resend error %s: %s", r.status_code, r.text[:300])
            raise DeliveryError(
                f"Email provider rejected the message ({r.status_code}): "
                f"{body.get('message') or r.text[:300]}"
            )
