"""Tests for the outbound adapters — email, push and token verification."""

from __future__ import annotations

import json
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from ride_gateway.config import Settings
from ride_gateway.services.auth import TokenVerifier
from ride_gateway.services.email_service import EmailService
from ride_gateway.services.push_service import FCMPushSender, PushDeliveryError


@pytest.fixture
def config() -> Settings:
    return Settings(
        email_from="rides@example.com",
        smtp_host="smtp.test",
        smtp_port=2525,
        fcm_project_id="demo-project",
        fcm_access_token="secret-token",
        jwt_secret="test-secret",
    )


# ── Email ────────────────────────────────────────────────

def test_otp_email_contents(config):
    msg = EmailService(config).build_otp_message("user@example.com", "482913")

    assert msg["To"] == "user@example.com"
    assert msg["From"] == "rides@example.com"
    assert msg["Subject"] == "Your OTP Code"
    plain = msg.get_body(preferencelist=("plain",)).get_content()
    html = msg.get_body(preferencelist=("html",)).get_content()
    assert "482913" in plain
    assert "10 minutes" in plain
    assert "<strong>482913</strong>" in html


@pytest.mark.asyncio
async def test_send_otp_uses_configured_smtp(config):
    with patch("ride_gateway.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
        await EmailService(config).send_otp("user@example.com", "482913")

    send.assert_awaited_once()
    assert send.await_args.kwargs["hostname"] == "smtp.test"
    assert send.await_args.kwargs["port"] == 2525


@pytest.mark.asyncio
async def test_send_otp_propagates_smtp_errors(config):
    failing = AsyncMock(side_effect=OSError("refused"))
    with patch("ride_gateway.services.email_service.aiosmtplib.send", new=failing):
        with pytest.raises(OSError):
            await EmailService(config).send_otp("user@example.com", "482913")


# ── Push ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_push_posts_fcm_message(config):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"name": "projects/demo-project/messages/1"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        result = await FCMPushSender(config, client=client).send(
            "device-token", "Document Approved!", "body text", data={"documentType": "id"}
        )

    assert result["name"].endswith("/messages/1")
    request = seen[0]
    assert request.url.path == "/v1/projects/demo-project/messages:send"
    assert request.headers["Authorization"] == "Bearer secret-token"
    message = json.loads(request.content)["message"]
    assert message["token"] == "device-token"
    assert message["notification"]["title"] == "Document Approved!"
    assert message["data"] == {"documentType": "id"}


@pytest.mark.asyncio
async def test_push_error_status_raises(config):
    transport = httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable"))
    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(PushDeliveryError):
            await FCMPushSender(config, client=client).send("t", "title", "body")


@pytest.mark.asyncio
async def test_push_transport_error_raises(config):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(PushDeliveryError):
            await FCMPushSender(config, client=client).send("t", "title", "body")


@pytest.mark.asyncio
async def test_push_requires_configuration():
    with pytest.raises(PushDeliveryError):
        await FCMPushSender(Settings(fcm_project_id="", fcm_access_token="")).send("t", "a", "b")


# ── Tokens ───────────────────────────────────────────────

def test_token_round_trip(config):
    verifier = TokenVerifier(config)
    claims = verifier.verify(verifier.issue("u-123"))
    assert claims["sub"] == "u-123"


def test_token_rejects_wrong_secret_and_expiry(config):
    verifier = TokenVerifier(config)
    other = TokenVerifier(Settings(jwt_secret="another-secret"))

    assert verifier.verify(other.issue("u-123")) is None
    assert verifier.verify(verifier.issue("u-123", expires_in=timedelta(seconds=-5))) is None
    assert verifier.verify("not.a.jwt") is None


def test_debug_is_off_by_default(monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)
    assert Settings(_env_file=None).debug is False
