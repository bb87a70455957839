import base64
import json
from urllib.parse import unquote

import httpx
import pytest

from app.email.resend import ResendNotifier, certificate_email_html
from app.exceptions import DeliveryError, FetchError, SuppressedRecipientError

PDF_URL = "https://s3.us-east-1.amazonaws.com/certs/abc123.pdf"
PDF_BYTES = b"%PDF-1.4 certificate"


def _notifier(handler) -> tuple[ResendNotifier, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    notifier = ResendNotifier(
        client, api_key="re_test", from_email="prime@metricasboss.com.br", subject="Certificado",
    )
    return notifier, client


@pytest.mark.asyncio
async def test_send_attaches_fetched_pdf() -> None:
    sent: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            assert str(request.url) == PDF_URL
            return httpx.Response(200, content=PDF_BYTES)
        sent.append(request)
        return httpx.Response(200, json={"id": "email_1"})

    notifier, client = _notifier(handler)
    async with client:
        await notifier.send("maria@example.com", PDF_URL)

    assert len(sent) == 1
    request = sent[0]
    assert str(request.url) == "https://api.resend.com/emails"
    assert request.headers["Authorization"] == "Bearer re_test"
    body = json.loads(request.content)
    assert body["from"] == "prime@metricasboss.com.br"
    assert body["to"] == ["maria@example.com"]
    assert body["subject"] == "Certificado"
    assert PDF_URL in body["html"]
    [attachment] = body["attachments"]
    assert attachment["filename"] == "certificate.pdf"
    assert attachment["content_type"] == "application/pdf"
    assert attachment["disposition"] == "attachment"
    assert base64.b64decode(attachment["content"]) == PDF_BYTES


@pytest.mark.asyncio
async def test_fetch_non_success_raises_fetch_error() -> None:
    posted = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            posted.append(request)
        return httpx.Response(403, text="AccessDenied")

    notifier, client = _notifier(handler)
    async with client:
        with pytest.raises(FetchError, match="HTTP 403"):
            await notifier.send("maria@example.com", PDF_URL)
    assert posted == []


@pytest.mark.asyncio
async def test_fetch_transport_error_is_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    notifier, client = _notifier(handler)
    async with client:
        with pytest.raises(DeliveryError) as exc_info:
            await notifier.send("maria@example.com", PDF_URL)
    assert isinstance(exc_info.value, FetchError)


@pytest.mark.asyncio
async def test_provider_error_raises_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, content=PDF_BYTES)
        return httpx.Response(
            422, json={"statusCode": 422, "name": "validation_error", "message": "Invalid `to` field."},
        )

    notifier, client = _notifier(handler)
    async with client:
        with pytest.raises(DeliveryError, match="Invalid `to` field"):
            await notifier.send("not-an-email", PDF_URL)


@pytest.mark.asyncio
async def test_suppressed_recipient_is_distinct_delivery_error(
    caplog: pytest.LogCaptureFixture,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, content=PDF_BYTES)
        return httpx.Response(
            422,
            json={"name": "validation_error", "message": "The recipient is on the suppression list."},
        )

    notifier, client = _notifier(handler)
    caplog.set_level("INFO", logger="app.email.resend")
    async with client:
        with pytest.raises(SuppressedRecipientError) as exc_info:
            await notifier.send("bounced@example.com", PDF_URL)

    assert isinstance(exc_info.value, DeliveryError)
    assert exc_info.value.email == "bounced@example.com"
    suppression_logs = [r for r in caplog.records if "suppression list" in r.getMessage()]
    assert suppression_logs and suppression_logs[0].levelname == "INFO"


@pytest.mark.asyncio
async def test_provider_unreachable_raises_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, content=PDF_BYTES)
        raise httpx.ReadTimeout("timed out", request=request)

    notifier, client = _notifier(handler)
    async with client:
        with pytest.raises(DeliveryError, match="request failed"):
            await notifier.send("maria@example.com", PDF_URL)


@pytest.mark.asyncio
async def test_reserved_characters_fetch_stored_object_and_link_is_escaped() -> None:
    stored_key = "/certs/form#42'x.pdf"
    url = "https://s3.us-east-1.amazonaws.com/certs/form%2342%27x.pdf"
    fetched: list[str] = []
    sent: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            path = unquote(request.url.raw_path.decode())
            fetched.append(path)
            if path != stored_key:
                return httpx.Response(403)
            return httpx.Response(200, content=PDF_BYTES)
        sent.append(request)
        return httpx.Response(200, json={"id": "email_2"})

    notifier, client = _notifier(handler)
    async with client:
        await notifier.send("maria@example.com", url)

    assert fetched == [stored_key]
    html_body = json.loads(sent[0].content)["html"]
    assert f"href='{url}'" in html_body


def test_email_link_cannot_break_out_of_href() -> None:
    html_body = certificate_email_html("https://example.com/a'onmouseover='x.pdf")
    assert "'onmouseover='" not in html_body
    assert "href='https://example.com/a&#x27;onmouseover=&#x27;x.pdf'" in html_body
