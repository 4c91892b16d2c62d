import json

import pytest

pytest.importorskip("dotenv")
httpx = pytest.importorskip("httpx")

from x402_agent import cli
from x402_agent.wallet import create_wallet as real_create_wallet


@pytest.fixture
def server(paid_server, make_requirements):
    return paid_server(make_requirements("400000"))


@pytest.fixture
def env(monkeypatch, server, test_key, payment_client_cls, chain_client_cls):
    monkeypatch.setenv("X402_PRIVATE_KEY", test_key)
    monkeypatch.delenv("X402_NETWORK", raising=False)
    monkeypatch.delenv("X402_RPC_URL", raising=False)
    monkeypatch.delenv("X402_MAX_PAYMENT", raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)

    created = []

    def fake_create_wallet(private_key, **options):
        wallet = real_create_wallet(
            private_key,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(server)),
            payment_client=payment_client_cls(),
            chain_client=chain_client_cls(),
            **options,
        )
        created.append(wallet)
        return wallet

    monkeypatch.setattr(cli, "create_wallet", fake_create_wallet)
    return created


def test_help_needs_no_key(monkeypatch, capsys):
    monkeypatch.delenv("X402_PRIVATE_KEY", raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)
    assert cli.main(["help"]) == 0
    assert "balance" in capsys.readouterr().out
    assert cli.main([]) == 0


def test_missing_key_exits_non_zero(monkeypatch, capsys):
    monkeypatch.delenv("X402_PRIVATE_KEY", raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)
    assert cli.main(["balance"]) == 1
    assert "X402_PRIVATE_KEY environment variable required" in capsys.readouterr().err


def test_balance(env, capsys):
    assert cli.main(["balance"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == f"Address: {env[0].address}"
    assert out[1] == "Network: eip155:8453"
    assert out[2] == "Balance: 1.5 USDC"


def test_balance_unsupported_network(env, monkeypatch, capsys):
    monkeypatch.setenv("X402_NETWORK", "eip155:1")
    assert cli.main(["balance"]) == 1
    assert capsys.readouterr().err.strip() == "Error: Unknown USDC address for network eip155:1"


def test_get_pays_and_prints_json(env, capsys):
    assert cli.main(["get", "http://paid.test/data"]) == 0
    captured = capsys.readouterr()
    assert "(Payment was made)" in captured.err
    assert json.loads(captured.out) == {"data": "premium"}


def test_get_over_budget_fails(env, monkeypatch, capsys):
    monkeypatch.setenv("X402_MAX_PAYMENT", "10")
    assert cli.main(["get", "http://paid.test/data"]) == 1
    assert capsys.readouterr().err.splitlines()[-1].startswith("Error: No acceptable payment option")


def test_post_sends_parsed_body(env, server, capsys):
    assert cli.main(["post", "http://paid.test/submit", '{"key": "value"}']) == 0
    assert json.loads(server.requests[-1].content) == {"key": "value"}
    assert "(Payment was made)" in capsys.readouterr().err


def test_post_rejects_invalid_json(env, server, capsys):
    assert cli.main(["post", "http://paid.test/submit", "{not json"]) == 1
    assert capsys.readouterr().err.startswith("Error: json-body is not valid JSON")
    assert server.requests == []


def test_invalid_max_payment_env(env, monkeypatch, capsys):
    monkeypatch.setenv("X402_MAX_PAYMENT", "a dollar")
    assert cli.main(["balance"]) == 1
    assert "X402_MAX_PAYMENT must be an integer" in capsys.readouterr().err
