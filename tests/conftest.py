import pytest

pytest.importorskip("x402")
httpx = pytest.importorskip("httpx")

from x402.http.utils import encode_payment_required_header
from x402.schemas import PaymentPayload, PaymentRequired, PaymentRequirements

# Well-known throwaway key, never holds funds.
TEST_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
BASE_USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


def make_requirements(amount: str, network: str = "eip155:8453", asset: str = BASE_USDC):
    return PaymentRequirements(
        scheme="exact",
        network=network,
        asset=asset,
        amount=amount,
        pay_to="0x1234567890123456789012345678901234567890",
        max_timeout_seconds=300,
        extra={"name": "USD Coin", "version": "2"},
    )


def payment_required_response(*requirements) -> httpx.Response:
    payment_required = PaymentRequired(x402_version=2, accepts=list(requirements))
    return httpx.Response(
        402,
        headers={"PAYMENT-REQUIRED": encode_payment_required_header(payment_required)},
        json={},
    )


class StubPaymentClient:
    """Stands in for x402Client: records what it was asked to sign."""

    def __init__(self, error: Exception | None = None) -> None:
        self.create_calls: list = []
        self._error = error

    async def create_payment_payload(self, payment_required):
        self.create_calls.append(payment_required)
        if self._error is not None:
            raise self._error
        return PaymentPayload(
            x402_version=2,
            payload={"signature": "0xmock"},
            accepted=payment_required.accepts[0],
        )


class StubChainClient:
    def __init__(self, balance: int = 1_500_000, decimals: int = 6) -> None:
        self.calls: list = []
        self._results = {"balanceOf": balance, "decimals": decimals}

    async def read_contract(self, address, function_name, args=()):
        self.calls.append((address, function_name, list(args)))
        return self._results[function_name]


class PaidServer:
    """MockTransport handler that charges for every request without a payment header."""

    def __init__(self, *requirements, body=None, always_402: bool = False) -> None:
        self.requirements = requirements
        self.body = body if body is not None else {"data": "premium"}
        self.always_402 = always_402
        self.requests: list = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.always_402 or "PAYMENT-SIGNATURE" not in request.headers:
            return payment_required_response(*self.requirements)
        if isinstance(self.body, str):
            return httpx.Response(200, text=self.body, headers={"PAYMENT-RESPONSE": "settled"})
        return httpx.Response(200, json=self.body, headers={"PAYMENT-RESPONSE": "settled"})


@pytest.fixture
def test_key():
    return TEST_KEY


@pytest.fixture
def base_usdc():
    return BASE_USDC


@pytest.fixture(name="make_requirements")
def make_requirements_fixture():
    return make_requirements


@pytest.fixture
def paid_server():
    return PaidServer


@pytest.fixture
def payment_client_cls():
    return StubPaymentClient


@pytest.fixture
def chain_client_cls():
    return StubChainClient


@pytest.fixture
def stub_payment_client():
    return StubPaymentClient()


@pytest.fixture
def stub_chain_client():
    return StubChainClient()
