"""HTTP requests that pay for themselves when a server answers 402."""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

import httpx
from x402.http.utils import decode_payment_response_header
from x402.http.x402_http_client import x402HTTPClient
from x402.schemas import SettleResponse

from .constants import PAYMENT_RESPONSE_HEADERS
from .policy import PolicyRejectionError, RequirementPredicate, filter_requirements

logger = logging.getLogger(__name__)


class PaymentState(enum.Enum):
    INITIAL = "initial"
    SUCCESS = "success"
    PAYMENT_REQUIRED = "payment_required"
    RETRY = "retry"
    REJECTED = "rejected"


class PaymentRetryRejectedError(RuntimeError):
    """Raised when the server answers 402 again after a payment was attached."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"Payment was not accepted by {response.request.url}")
        self.response = response


@dataclass
class _Call:
    request: httpx.Request
    state: PaymentState = PaymentState.INITIAL
    response: Optional[httpx.Response] = None
    payment_required: Any = None
    payment_headers: Dict[str, str] = field(default_factory=dict)
    requests_sent: int = 0


class PaidFetch:
    """Send requests through ``httpx`` and settle 402 responses via an x402 client.

    Every call walks INITIAL -> SUCCESS, or INITIAL -> PAYMENT_REQUIRED ->
    RETRY -> SUCCESS, or INITIAL -> PAYMENT_REQUIRED -> REJECTED. The retry
    happens at most once, so a call never sends more than ``MAX_REQUESTS``.

    ``payment_client`` is an ``x402Client`` (or ``x402ClientSync``); it picks
    the requirement it has a scheme for and signs it. ``predicates`` run first
    and decide which requirements the wallet is willing to pay at all.
    """

    MAX_REQUESTS = 2

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        payment_client: Any,
        predicates: Sequence[RequirementPredicate] = (),
    ) -> None:
        self._http = http_client
        self._payment_client = payment_client
        self._x402_http = x402HTTPClient(payment_client)
        self._predicates = tuple(predicates)

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        content: bytes | str | None = None,
    ) -> httpx.Response:
        call = _Call(request=self._http.build_request(method, url, headers=headers, content=content))
        handlers = {
            PaymentState.INITIAL: self._send_initial,
            PaymentState.PAYMENT_REQUIRED: self._handle_payment_required,
            PaymentState.RETRY: self._send_retry,
            PaymentState.REJECTED: self._reject,
        }
        while call.state is not PaymentState.SUCCESS:
            call.state = await handlers[call.state](call)
        return call.response

    async def _send(self, call: _Call, request: httpx.Request) -> httpx.Response:
        if call.requests_sent >= self.MAX_REQUESTS:
            raise RuntimeError("Payment retry limit exceeded")
        call.requests_sent += 1
        return await self._http.send(request)

    async def _send_initial(self, call: _Call) -> PaymentState:
        call.response = await self._send(call, call.request)
        if call.response.status_code != 402:
            return PaymentState.SUCCESS
        logger.debug("%s %s answered 402", call.request.method, call.request.url)
        return PaymentState.PAYMENT_REQUIRED

    async def _handle_payment_required(self, call: _Call) -> PaymentState:
        response = call.response
        await response.aread()

        body = None
        try:
            body = json.loads(response.content.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            pass

        payment_required = self._x402_http.get_payment_required_response(response.headers.get, body)
        call.payment_required = payment_required

        accepted = filter_requirements(payment_required.accepts, self._predicates)
        if not accepted:
            return PaymentState.REJECTED
        logger.debug(
            "%d of %d payment requirement(s) within policy", len(accepted), len(payment_required.accepts)
        )

        payload = self._payment_client.create_payment_payload(
            payment_required.model_copy(update={"accepts": accepted})
        )
        if hasattr(payload, "__await__"):
            payload = await payload

        call.payment_headers = self._x402_http.encode_payment_signature_header(payload)
        return PaymentState.RETRY

    async def _send_retry(self, call: _Call) -> PaymentState:
        original = call.request
        headers = dict(original.headers)
        headers.update(call.payment_headers)
        headers["Access-Control-Expose-Headers"] = ",".join(PAYMENT_RESPONSE_HEADERS)
        retry = self._http.build_request(
            original.method, original.url, headers=headers, content=original.content
        )

        if call.response is not None:
            await call.response.aclose()
        call.response = await self._send(call, retry)
        if call.response.status_code == 402:
            raise PaymentRetryRejectedError(call.response)
        logger.info("paid request to %s completed with status %d", original.url, call.response.status_code)
        return PaymentState.SUCCESS

    async def _reject(self, call: _Call) -> PaymentState:
        logger.info(
            "no payment requirement for %s fits the wallet policy; not signing", call.request.url
        )
        raise PolicyRejectionError(call.payment_required, call.response)


def is_paid(response: httpx.Response) -> bool:
    return any(name in response.headers for name in PAYMENT_RESPONSE_HEADERS)


def settlement(response: httpx.Response) -> Optional[SettleResponse]:
    """Decode the settlement header of a paid response, if there is one."""
    for name in PAYMENT_RESPONSE_HEADERS:
        header = response.headers.get(name)
        if header:
            return decode_payment_response_header(header)
    return None


@dataclass(frozen=True)
class PaidResponse:
    status: int
    data: Any
    paid: bool
    headers: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "data": self.data, "paid": self.paid}


async def read_paid_response(response: httpx.Response) -> PaidResponse:
    """Read the whole body, preferring JSON and falling back to the raw text."""
    await response.aread()
    text = response.text
    try:
        data: Any = json.loads(text)
    except ValueError:
        data = text
    return PaidResponse(
        status=response.status_code,
        data=data,
        paid=is_paid(response),
        headers=dict(response.headers),
    )
