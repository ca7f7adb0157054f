"""Tests for Scell clients."""

import asyncio
import json
from datetime import date
from typing import Any

import httpx
import pytest
from pytest_httpx import HTTPXMock

from scell_sdk import (
    Address,
    APIError,
    CancellationToken,
    CompanyStatus,
    Environment,
    ErrorKind,
    InvoiceDirection,
    InvoiceFormat,
    InvoiceLine,
    InvoiceStatus,
    NetworkError,
    RateLimitError,
    RequestCancelledError,
    RequestOptions,
    RequestTimeoutError,
    RetryPolicy,
    ScellApiClient,
    ScellClient,
    SignatureStatus,
    ValidationError,
    WebhookEvent,
)

BASE_URL = "https://api.scell.example.com/api/v1"
FAST_RETRY = RetryPolicy(max_attempts=3, base_delay_ms=0, jitter_fraction=0)


class SlowTransport(httpx.AsyncBaseTransport):
    """Answers every request with `body` after `delay` seconds."""

    def __init__(self, delay: float, body: Any) -> None:
        self.delay = delay
        self.body = body
        self.requests = 0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        await asyncio.sleep(self.delay)
        return httpx.Response(200, json=self.body)


def invoice_json(**overrides: Any) -> dict[str, Any]:
    data = {
        "id": "inv_123",
        "external_id": None,
        "invoice_number": "FACT-2026-001",
        "direction": "outgoing",
        "output_format": "facturx",
        "issue_date": "2026-01-15",
        "due_date": "2026-02-15",
        "currency": "EUR",
        "total_ht": 100.0,
        "total_tax": 20.0,
        "total_ttc": 120.0,
        "seller": {
            "siret": "12345678901234",
            "name": "Seller SAS",
            "address": {"line1": "1 rue de Paris", "postal_code": "75001", "city": "Paris"},
        },
        "buyer": {
            "siret": "98765432109876",
            "name": "Buyer SARL",
            "address": {"line1": "2 avenue de Lyon", "postal_code": "69001", "city": "Lyon"},
        },
        "lines": [
            {
                "line_number": 1,
                "description": "Consulting",
                "quantity": 1,
                "unit_price": 100.0,
                "tax_rate": 20.0,
                "total_ht": 100.0,
                "total_tax": 20.0,
                "total_ttc": 120.0,
            }
        ],
        "status": "pending",
        "status_message": None,
        "environment": "sandbox",
        "archive_enabled": False,
        "amount_charged": None,
        "created_at": "2026-01-15T10:00:00Z",
        "validated_at": None,
        "transmitted_at": None,
        "completed_at": None,
    }
    data.update(overrides)
    return data


def signature_json(**overrides: Any) -> dict[str, Any]:
    data = {
        "id": "sig_123",
        "title": "Service contract",
        "document_name": "contract.pdf",
        "document_size": 2048,
        "status": "waiting_signers",
        "environment": "sandbox",
        "created_at": "2026-01-15T10:00:00Z",
        "signers": [
            {
                "id": "sgn_1",
                "first_name": "Jean",
                "last_name": "Dupont",
                "email": "jean@example.com",
                "phone": None,
                "auth_method": "email",
                "status": "pending",
                "signing_url": "https://sign.scell.io/s/abc",
                "signed_at": None,
                "refused_at": None,
            }
        ],
    }
    data.update(overrides)
    return data


class TestScellClient:
    @pytest.mark.asyncio
    async def test_sends_bearer_token(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"data": {"amount": 50.0, "currency": "EUR"}})

        async with ScellClient("tok_123", base_url=BASE_URL) as client:
            balance = await client.get_balance()

        request = httpx_mock.get_request()
        assert request is not None
        assert request.headers["Authorization"] == "Bearer tok_123"
        assert str(request.url) == f"{BASE_URL}/balance"
        assert balance.amount == 50.0

    @pytest.mark.asyncio
    async def test_strips_trailing_slash(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"data": []})

        async with ScellClient("tok", base_url=BASE_URL + "/") as client:
            await client.list_companies()

        request = httpx_mock.get_request()
        assert request is not None
        assert str(request.url) == f"{BASE_URL}/companies"

    @pytest.mark.asyncio
    async def test_custom_headers(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"data": []})

        async with ScellClient("tok", base_url=BASE_URL, headers={"X-Trace": "t-1"}) as client:
            await client.list_api_keys()

        request = httpx_mock.get_request()
        assert request is not None
        assert request.headers["X-Trace"] == "t-1"


class TestScellApiClient:
    @pytest.mark.asyncio
    async def test_sends_api_key(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"data": invoice_json()})

        async with ScellApiClient("sk_test_123", base_url=BASE_URL) as client:
            await client.get_invoice("inv_123")

        request = httpx_mock.get_request()
        assert request is not None
        assert request.headers["X-API-Key"] == "sk_test_123"
        assert "Authorization" not in request.headers


class TestInvoices:
    @pytest.mark.asyncio
    async def test_create_invoice(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            method="POST",
            url=f"{BASE_URL}/invoices",
            json={"message": "Invoice created", "data": invoice_json()},
        )

        async with ScellApiClient("sk_test", base_url=BASE_URL) as client:
            invoice = await client.create_invoice(
                invoice_number="FACT-2026-001",
                direction=InvoiceDirection.OUTGOING,
                output_format=InvoiceFormat.FACTURX,
                issue_date=date(2026, 1, 15),
                total_ht=100.0,
                total_tax=20.0,
                total_ttc=120.0,
                seller_siret="12345678901234",
                seller_name="Seller SAS",
                seller_address=Address("1 rue de Paris", "75001", "Paris"),
                buyer_siret="98765432109876",
                buyer_name="Buyer SARL",
                buyer_address=Address("2 avenue de Lyon", "69001", "Lyon"),
                lines=[InvoiceLine("Consulting", 1, 100.0, 20.0, 100.0, 20.0, 120.0)],
            )

        request = httpx_mock.get_request()
        assert request is not None
        body = json.loads(request.content)
        assert body["direction"] == "outgoing"
        assert body["output_format"] == "facturx"
        assert body["issue_date"] == "2026-01-15"
        assert body["seller_address"] == {
            "line1": "1 rue de Paris",
            "postal_code": "75001",
            "city": "Paris",
        }
        assert body["lines"][0]["description"] == "Consulting"
        assert "due_date" not in body

        assert invoice.id == "inv_123"
        assert invoice.status == InvoiceStatus.PENDING
        assert invoice.issue_date == date(2026, 1, 15)
        assert invoice.seller is not None and invoice.seller.name == "Seller SAS"
        assert invoice.lines[0].total_ttc == 120.0

    @pytest.mark.asyncio
    async def test_list_invoices_with_filters(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            json={
                "data": [invoice_json()],
                "meta": {"current_page": 1, "last_page": 3, "per_page": 1, "total": 3},
            }
        )

        async with ScellApiClient("sk_test", base_url=BASE_URL) as client:
            page = await client.list_invoices(
                status=InvoiceStatus.PENDING,
                environment=Environment.SANDBOX,
                date_from=date(2026, 1, 1),
                per_page=1,
            )

        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.params["status"] == "pending"
        assert request.url.params["environment"] == "sandbox"
        assert request.url.params["from"] == "2026-01-01"
        assert request.url.params["per_page"] == "1"
        assert "to" not in request.url.params
        assert len(page.data) == 1
        assert page.meta is not None and page.meta.has_more

    @pytest.mark.asyncio
    async def test_mark_invoice_paid(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            json={
                "data": invoice_json(
                    status="paid",
                    paid_at="2026-01-24T10:30:00Z",
                    payment_reference="VIR-2026-0124",
                )
            }
        )

        async with ScellApiClient("sk_test", base_url=BASE_URL) as client:
            invoice = await client.mark_invoice_paid(
                "inv_123",
                payment_reference="VIR-2026-0124",
                paid_at="2026-01-24T10:30:00Z",
                note="Payment received via bank transfer",
            )

        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.path == "/api/v1/invoices/inv_123/mark-paid"
        assert json.loads(request.content)["payment_reference"] == "VIR-2026-0124"
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.payment_reference == "VIR-2026-0124"

    @pytest.mark.asyncio
    async def test_download_invoice_file(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(content=b"%PDF-1.7", headers={"Content-Type": "application/pdf"})

        async with ScellApiClient("sk_test", base_url=BASE_URL) as client:
            content = await client.download_invoice_file("inv_123", "xml")

        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.params["format"] == "xml"
        assert request.headers["Accept"] == "*/*"
        assert content == b"%PDF-1.7"

    @pytest.mark.asyncio
    async def test_path_segments_are_escaped(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"data": invoice_json()})

        async with ScellApiClient("sk_test", base_url=BASE_URL) as client:
            await client.get_invoice("a/b")

        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.raw_path == b"/api/v1/invoices/a%2Fb"


class TestSignatures:
    @pytest.mark.asyncio
    async def test_create_signature(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"message": "created", "data": signature_json()})

        async with ScellApiClient("sk_test", base_url=BASE_URL) as client:
            signature = await client.create_signature(
                title="Service contract",
                document="JVBERi0xLjcK",
                document_name="contract.pdf",
                signers=[
                    {
                        "first_name": "Jean",
                        "last_name": "Dupont",
                        "email": "jean@example.com",
                        "auth_method": "email",
                    }
                ],
            )

        request = httpx_mock.get_request()
        assert request is not None
        assert json.loads(request.content)["signers"][0]["auth_method"] == "email"
        assert signature.status == SignatureStatus.WAITING_SIGNERS
        assert signature.signers[0].full_name == "Jean Dupont"

    @pytest.mark.asyncio
    async def test_remind_signers(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"message": "Reminders sent", "signers_reminded": 2})

        async with ScellApiClient("sk_test", base_url=BASE_URL) as client:
            assert await client.remind_signers("sig_123") == 2


class TestAccount:
    @pytest.mark.asyncio
    async def test_get_kyc_status(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            json={"status": "active", "kyc_reference": "kyc_1", "message": "Verified"}
        )

        async with ScellClient("tok", base_url=BASE_URL) as client:
            status = await client.get_kyc_status("cmp_1")

        assert status.status == CompanyStatus.ACTIVE
        assert status.kyc_reference == "kyc_1"

    @pytest.mark.asyncio
    async def test_create_webhook_returns_secret(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            json={
                "message": "Webhook created",
                "data": {
                    "id": "wh_1",
                    "url": "https://example.com/hooks",
                    "events": ["invoice.validated"],
                    "is_active": True,
                    "environment": "production",
                    "created_at": "2026-01-15T10:00:00Z",
                    "secret": "whsec_abc",
                },
            }
        )

        async with ScellClient("tok", base_url=BASE_URL) as client:
            webhook = await client.create_webhook(
                url="https://example.com/hooks",
                events=[WebhookEvent.INVOICE_VALIDATED],
                environment=Environment.PRODUCTION,
            )

        request = httpx_mock.get_request()
        assert request is not None
        assert json.loads(request.content)["events"] == ["invoice.validated"]
        assert webhook.secret == "whsec_abc"
        assert "whsec_abc" not in repr(webhook)

    @pytest.mark.asyncio
    async def test_delete_webhook(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="DELETE", status_code=204)

        async with ScellClient("tok", base_url=BASE_URL) as client:
            assert await client.delete_webhook("wh_1") is None


class TestErrors:
    @pytest.mark.asyncio
    async def test_authentication_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(status_code=401, json={"message": "Unauthenticated."})

        async with ScellClient("bad", base_url=BASE_URL, retry=FAST_RETRY) as client:
            with pytest.raises(APIError) as exc_info:
                await client.list_companies()

        assert exc_info.value.kind is ErrorKind.AUTHENTICATION
        assert exc_info.value.is_unauthorized()
        assert exc_info.value.message == "Unauthenticated."
        assert len(httpx_mock.get_requests()) == 1

    @pytest.mark.asyncio
    async def test_validation_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            status_code=422,
            json={
                "message": "The given data was invalid.",
                "errors": {"seller_siret": ["The seller siret must be 14 characters."]},
            },
        )

        async with ScellApiClient("sk_test", base_url=BASE_URL, retry=FAST_RETRY) as client:
            with pytest.raises(ValidationError) as exc_info:
                await client.get_invoice("inv_123")

        assert exc_info.value.has_field_error("seller_siret")
        assert exc_info.value.all_messages() == ["The seller siret must be 14 characters."]

    @pytest.mark.asyncio
    async def test_retries_server_errors(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(status_code=503, json={"message": "Unavailable"})
        httpx_mock.add_response(status_code=500, text="oops")
        httpx_mock.add_response(json={"data": invoice_json()})

        async with ScellApiClient("sk_test", base_url=BASE_URL, retry=FAST_RETRY) as client:
            invoice = await client.get_invoice("inv_123")

        assert invoice.id == "inv_123"
        assert len(httpx_mock.get_requests()) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, httpx_mock: HTTPXMock) -> None:
        for _ in range(3):
            httpx_mock.add_response(status_code=502, json={"message": "Bad gateway"})

        async with ScellApiClient("sk_test", base_url=BASE_URL, retry=FAST_RETRY) as client:
            with pytest.raises(APIError) as exc_info:
                await client.get_invoice("inv_123")

        assert exc_info.value.status_code == 502
        assert exc_info.value.is_server_error()
        assert len(httpx_mock.get_requests()) == 3

    @pytest.mark.asyncio
    async def test_rate_limit_carries_retry_after(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            status_code=429,
            headers={"Retry-After": "7"},
            json={"message": "Too many requests"},
        )

        async with ScellApiClient("sk_test", base_url=BASE_URL, enable_retry=False) as client:
            with pytest.raises(RateLimitError) as exc_info:
                await client.get_invoice("inv_123")

        assert exc_info.value.retry_after == 7
        assert exc_info.value.is_rate_limited()

    @pytest.mark.asyncio
    async def test_skip_retry_sends_once(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(status_code=500, json={"message": "boom"})

        async with ScellApiClient("sk_test", base_url=BASE_URL, retry=FAST_RETRY) as client:
            with pytest.raises(APIError):
                await client.get_invoice("inv_123", RequestOptions(skip_retry=True))

        assert len(httpx_mock.get_requests()) == 1

    @pytest.mark.asyncio
    async def test_network_errors_are_retried(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
        httpx_mock.add_response(json={"data": signature_json()})

        async with ScellApiClient("sk_test", base_url=BASE_URL, retry=FAST_RETRY) as client:
            signature = await client.get_signature("sig_123")

        assert signature.id == "sig_123"
        assert len(httpx_mock.get_requests()) == 2

    @pytest.mark.asyncio
    async def test_network_error_after_retries(self, httpx_mock: HTTPXMock) -> None:
        for _ in range(3):
            httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        async with ScellApiClient("sk_test", base_url=BASE_URL, retry=FAST_RETRY) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get_signature("sig_123")

        assert isinstance(exc_info.value.original_error, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeouts_are_not_retried(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))

        async with ScellApiClient("sk_test", base_url=BASE_URL, retry=FAST_RETRY) as client:
            with pytest.raises(RequestTimeoutError):
                await client.get_signature("sig_123")

        assert len(httpx_mock.get_requests()) == 1

    @pytest.mark.asyncio
    async def test_cancelled_token_prevents_request(self, httpx_mock: HTTPXMock) -> None:
        token = CancellationToken()
        token.cancel()

        async with ScellApiClient("sk_test", base_url=BASE_URL, retry=FAST_RETRY) as client:
            with pytest.raises(RequestCancelledError):
                await client.get_invoice("inv_123", RequestOptions(cancel_token=token))

        assert httpx_mock.get_requests() == []

    @pytest.mark.asyncio
    async def test_non_json_success_body_raises_api_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(text="<html>maintenance</html>")

        async with ScellApiClient("sk_test", base_url=BASE_URL, retry=FAST_RETRY) as client:
            with pytest.raises(APIError) as exc_info:
                await client.get_invoice("inv_123")

        assert exc_info.value.kind is ErrorKind.UNKNOWN
        assert exc_info.value.status_code == 200
        assert exc_info.value.code == "INVALID_RESPONSE"
        assert exc_info.value.details == "<html>maintenance</html>"
        assert len(httpx_mock.get_requests()) == 1


class TestInFlightCancellation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("skip_retry", [False, True])
    async def test_cancel_aborts_in_flight_request(self, skip_retry: bool) -> None:
        transport = SlowTransport(delay=5, body={"data": invoice_json()})
        token = CancellationToken()
        options = RequestOptions(skip_retry=skip_retry, cancel_token=token)

        async with ScellApiClient("sk_test", base_url=BASE_URL, transport=transport) as client:
            task = asyncio.ensure_future(client.get_invoice("inv_123", options))
            await asyncio.sleep(0.05)
            token.cancel()

            with pytest.raises(RequestCancelledError):
                await asyncio.wait_for(task, timeout=1)

        assert transport.requests == 1

    @pytest.mark.asyncio
    async def test_uncancelled_token_returns_response(self) -> None:
        transport = SlowTransport(delay=0.01, body={"data": invoice_json()})
        options = RequestOptions(cancel_token=CancellationToken())

        async with ScellApiClient("sk_test", base_url=BASE_URL, transport=transport) as client:
            invoice = await client.get_invoice("inv_123", options)

        assert invoice.id == "inv_123"
