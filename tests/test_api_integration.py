"""
Integration tests for the Token Wallet API
Tests end-to-end workflows using FastAPI TestClient
"""

import threading

import pytest
from fastapi.testclient import TestClient

from token_wallet.api import create_app
from token_wallet.config import WalletConfig
from token_wallet.wallet import Wallet, U64_MAX


@pytest.fixture
def wallet():
    return Wallet()


@pytest.fixture
def client(wallet):
    """Create a test client serving a fresh in-memory wallet"""
    app = create_app(wallet=wallet, config=WalletConfig(log_level="WARNING"))
    with TestClient(app) as client:
        yield client


class TestHealthEndpoints:
    """Test basic health and root endpoints"""

    def test_health(self, client):
        """Test health endpoint"""
        r = client.get("/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "healthy"

    def test_root(self, client):
        """Test root endpoint"""
        r = client.get("/")
        assert r.status_code == 200
        data = r.json()
        assert data["name"] == "Token Wallet API"
        assert "balance" in data["endpoints"]


class TestWalletOwnership:
    """Test that each application owns its own wallet"""

    def test_app_uses_injected_wallet(self, client, wallet):
        wallet.receive_tokens("sender_address", 7)
        r = client.get("/balance")
        assert r.json() == {"balance": 7}

    def test_apps_do_not_share_state(self):
        config = WalletConfig(log_level="WARNING")
        first = TestClient(create_app(config=config))
        second = TestClient(create_app(config=config))

        first.post("/receive", json={"from_address": "sender_address", "amount": 5})

        assert first.get("/balance").json()["balance"] == 5
        assert second.get("/balance").json()["balance"] == 0

    def test_default_wallet_uses_configured_limit(self):
        app = create_app(config=WalletConfig(log_level="WARNING", max_balance=50))
        assert app.state.wallet.max_balance == 50


class TestBalanceFlow:
    """End-to-end send/receive scenarios"""

    def test_new_wallet_balance(self, client):
        r = client.get("/balance")
        assert r.status_code == 200
        assert r.json() == {"balance": 0}

    def test_receive_tokens(self, client):
        r = client.post("/receive", json={"from_address": "sender_address", "amount": 100})
        assert r.status_code == 200
        data = r.json()
        assert data["message"] == "Tokens received successfully"
        assert data["balance"] == 100

        assert client.get("/balance").json()["balance"] == 100

    def test_send_tokens(self, client):
        client.post("/receive", json={"from_address": "sender_address", "amount": 100})

        r = client.post("/send", json={"to_address": "receiver_address", "amount": 50})
        assert r.status_code == 200
        assert r.json()["message"] == "Tokens sent successfully"
        assert r.json()["balance"] == 50

        assert client.get("/balance").json()["balance"] == 50
        r = client.get("/balances/receiver_address")
        assert r.json() == {"address": "receiver_address", "balance": 50}

    def test_insufficient_funds(self, client):
        client.post("/receive", json={"from_address": "sender_address", "amount": 10})

        r = client.post("/send", json={"to_address": "receiver_address", "amount": 50})
        assert r.status_code == 400
        assert r.json()["detail"] == "Insufficient funds"

        assert client.get("/balance").json()["balance"] == 10
        assert client.get("/balances/receiver_address").json()["balance"] == 0

    def test_snapshot(self, client):
        client.post("/receive", json={"from_address": "sender_address", "amount": 10})
        client.post("/send", json={"to_address": "alice", "amount": 3})

        r = client.get("/snapshot")
        assert r.status_code == 200
        data = r.json()
        assert data["owner_balance"] == 7
        assert data["balances"] == {"alice": 3}
        assert data["total"] == 10

    def test_large_amounts_pass_through_unchanged(self, client):
        r = client.post("/receive", json={"from_address": "sender_address", "amount": U64_MAX})
        assert r.status_code == 200
        assert client.get("/balance").json()["balance"] == U64_MAX


class TestErrorMapping:
    """Test how wallet errors surface over HTTP"""

    def test_receive_overflow(self, client):
        client.post("/receive", json={"from_address": "sender_address", "amount": U64_MAX})

        r = client.post("/receive", json={"from_address": "sender_address", "amount": 1})
        assert r.status_code == 500
        assert "exceed" in r.json()["detail"]
        assert client.get("/balance").json()["balance"] == U64_MAX

    def test_receive_past_configured_limit(self):
        """Test that a lowered ceiling surfaces as an overflow, not a bad amount"""
        app = create_app(config=WalletConfig(log_level="WARNING", max_balance=10))
        client = TestClient(app)

        r = client.post("/receive", json={"from_address": "sender_address", "amount": 11})
        assert r.status_code == 500
        assert client.get("/balance").json()["balance"] == 0

        r = client.post("/receive", json={"from_address": "sender_address", "amount": 10})
        assert r.status_code == 200
        assert r.json()["balance"] == 10

    @pytest.mark.parametrize("amount", [-1, U64_MAX + 1, "10", 1.5])
    def test_invalid_amount_rejected(self, client, amount):
        r = client.post("/receive", json={"from_address": "sender_address", "amount": amount})
        assert r.status_code == 422
        assert client.get("/balance").json()["balance"] == 0

    def test_missing_fields_rejected(self, client):
        r = client.post("/send", json={"amount": 1})
        assert r.status_code == 422

    def test_empty_address_rejected(self, client):
        r = client.post("/send", json={"to_address": "", "amount": 0})
        assert r.status_code == 422

    def test_blank_address_rejected(self, client):
        r = client.post("/send", json={"to_address": "   ", "amount": 0})
        assert r.status_code == 400
        assert client.get("/snapshot").json()["balances"] == {}


class TestConcurrentRequests:
    """Test double-spend protection through the HTTP layer"""

    def test_concurrent_full_balance_sends(self, client):
        client.post("/receive", json={"from_address": "sender_address", "amount": 100})

        statuses = []
        lock = threading.Lock()

        def send(recipient):
            r = client.post("/send", json={"to_address": recipient, "amount": 100})
            with lock:
                statuses.append(r.status_code)

        threads = [threading.Thread(target=send, args=(f"receiver_{i}",)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(statuses) == [200, 400, 400, 400]
        assert client.get("/balance").json()["balance"] == 0
        assert client.get("/snapshot").json()["total"] == 100

    def test_concurrent_receives_report_own_balance(self, client):
        """Test that each response carries the balance its own credit produced"""
        balances = []
        lock = threading.Lock()

        def receive():
            for _ in range(10):
                r = client.post("/receive", json={"from_address": "sender_address", "amount": 1})
                with lock:
                    balances.append(r.json()["balance"])

        threads = [threading.Thread(target=receive) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(balances) == list(range(1, 41))
        assert client.get("/balance").json()["balance"] == 40
