"""
Unit tests for the retrying HTTP layer and the JSON-RPC client.

Tests follow the Given/When/Then pattern for clarity.
"""

import json
from unittest.mock import patch

import pytest
import requests
import responses

from approval_guard.lib.http_client import APIError, RateLimitError, RequestTimeoutError
from approval_guard.lib.rpc_client import JsonRpcClient, RPCError

RPC_URL = "https://rpc.test.invalid"


def make_client(**kwargs):
    settings = {"initial_delay": 0.001, "max_retries": 2, "jitter": 0}
    settings.update(kwargs)
    return JsonRpcClient(RPC_URL, **settings)


class TestRateLimitHandling:
    """Tests for 429 rate limit retry behavior."""

    @responses.activate
    def test_retries_on_429_with_exponential_backoff(self):
        """
        Given a client configured with retry settings
        When a 429 response is received
        Then the client should retry until it succeeds
        """
        # Given
        client = make_client(max_retries=3)

        # First two calls return 429, third succeeds
        responses.add(responses.POST, RPC_URL, status=429)
        responses.add(responses.POST, RPC_URL, status=429)
        responses.add(
            responses.POST,
            RPC_URL,
            json={"jsonrpc": "2.0", "id": 1, "result": "0x123"},
            status=200,
        )

        # When
        result = client.request("eth_blockNumber", [])

        # Then
        assert result == "0x123"
        assert len(responses.calls) == 3

    @responses.activate
    def test_raises_rate_limit_error_after_max_retries(self):
        """
        Given a client with limited retries
        When 429 responses persist beyond max retries
        Then RateLimitError should be raised
        """
        # Given
        client = make_client()
        for _ in range(4):
            responses.add(responses.POST, RPC_URL, status=429)

        # When / Then
        with pytest.raises(RateLimitError) as exc_info:
            client.request("eth_blockNumber", [])

        assert exc_info.value.status_code == 429
        assert len(responses.calls) == 3  # Initial + 2 retries

    @responses.activate
    def test_retries_on_server_error(self):
        """
        Given a client
        When a 500 server error is received
        Then the client should retry with backoff
        """
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, status=500)
        responses.add(
            responses.POST,
            RPC_URL,
            json={"jsonrpc": "2.0", "id": 1, "result": "0xabc"},
            status=200,
        )

        # When
        result = client.request("eth_blockNumber", [])

        # Then
        assert result == "0xabc"
        assert len(responses.calls) == 2

    def test_jitter_applies_randomization_to_delay(self):
        """
        Given a client with jitter enabled
        When calculating delay with jitter
        Then the delay should be within the expected range
        """
        # Given
        client = JsonRpcClient(RPC_URL, jitter=0.1)

        # When
        jittered_delays = [client._apply_jitter(1.0) for _ in range(100)]

        # Then
        for delay in jittered_delays:
            assert 0.9 <= delay <= 1.1


class TestErrorHandling:
    """Tests for error translation."""

    @responses.activate
    def test_timeout_is_raised_without_retry(self):
        """
        Given an endpoint that times out
        When making a request
        Then RequestTimeoutError should be raised after a single attempt
        """
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, body=requests.exceptions.ReadTimeout("slow node"))

        # When / Then
        with pytest.raises(RequestTimeoutError, match="timed out"):
            client.request("eth_call", [])
        assert len(responses.calls) == 1

    @responses.activate
    def test_unauthorized_is_not_retried(self):
        """
        Given an endpoint rejecting the credentials
        When making a request
        Then APIError with the HTTP status should be raised immediately
        """
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, status=401)

        # When / Then
        with pytest.raises(APIError) as exc_info:
            client.request("eth_call", [])
        assert exc_info.value.status_code == 401
        assert len(responses.calls) == 1

    @responses.activate
    def test_client_error_is_not_retried(self):
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, status=404)

        # When / Then
        with pytest.raises(APIError) as exc_info:
            client.request("eth_call", [])
        assert exc_info.value.status_code == 404
        assert len(responses.calls) == 1

    @responses.activate
    def test_connection_error_is_retried(self):
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, body=requests.exceptions.ConnectionError("reset"))
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 1, "result": "0x1"})

        # When
        result = client.request("eth_blockNumber", [])

        # Then
        assert result == "0x1"
        assert len(responses.calls) == 2

    @responses.activate
    def test_raises_rpc_error_for_error_in_response(self):
        """
        Given a node returning a JSON-RPC error body
        When making a request
        Then RPCError should carry the message and code
        """
        # Given
        client = make_client()
        responses.add(
            responses.POST,
            RPC_URL,
            json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "execution reverted"}},
            status=200,
        )

        # When / Then
        with pytest.raises(RPCError, match="execution reverted") as exc_info:
            client.request("eth_call", [])
        assert exc_info.value.status_code == -32000

    @responses.activate
    def test_non_object_error_member_raises_rpc_error(self):
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 1, "error": "boom"})

        # When / Then
        with pytest.raises(RPCError, match="boom"):
            client.request("eth_call", [])

    @responses.activate
    def test_non_object_reply_raises_api_error(self):
        """
        Given a node answering with a bare JSON array
        When making a request
        Then APIError should be raised instead of a TypeError
        """
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, json=["unexpected"])

        # When / Then
        with pytest.raises(APIError, match="expected an object"):
            client.request("eth_call", [])

    @responses.activate
    def test_retries_stop_when_budget_runs_out(self):
        """
        Given a node that keeps failing and a 2 second budget
        When the next backoff wait would overrun the budget
        Then RequestTimeoutError should be raised without sleeping through it
        """
        # Given
        client = make_client(initial_delay=1.0, max_retries=5)
        responses.add(responses.POST, RPC_URL, status=503)

        # When
        with patch("approval_guard.lib.http_client.time.sleep") as sleep:
            with pytest.raises(RequestTimeoutError, match="budget") as exc_info:
                client.request("eth_call", [], timeout=2.0)

        # Then
        sleep.assert_called_once_with(1.0)
        assert len(responses.calls) == 2
        assert exc_info.value.status_code == 503


class TestNodeMethods:
    """Tests for the typed node method wrappers."""

    @responses.activate
    def test_eth_call_sends_latest_block_call(self):
        """
        Given a node
        When performing eth_call
        Then the payload should target the contract at the latest block
        """
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 1, "result": "0x01"})

        # When
        result = client.eth_call("0x" + "11" * 20, "0xdeadbeef")

        # Then
        body = json.loads(responses.calls[0].request.body)
        assert result == "0x01"
        assert body["method"] == "eth_call"
        assert body["params"] == [{"to": "0x" + "11" * 20, "data": "0xdeadbeef"}, "latest"]

    @responses.activate
    def test_hex_quantities_are_decoded(self):
        """
        Given a node returning hex quantities
        When reading gas price and chain id
        Then integers should be returned
        """
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 1, "result": "0x3b9aca00"})
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 2, "result": "0x2105"})

        # When / Then
        assert client.gas_price() == 1_000_000_000
        assert client.get_chain_id() == 8453

    @responses.activate
    def test_request_ids_increase(self):
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 1, "result": []})
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 2, "result": []})

        # When
        client.accounts()
        client.accounts()

        # Then
        ids = [json.loads(call.request.body)["id"] for call in responses.calls]
        assert ids == [1, 2]

    @responses.activate
    def test_missing_quantity_raises_api_error(self):
        """
        Given a node returning null for a quantity
        When reading the gas price
        Then APIError should be raised
        """
        # Given
        client = make_client()
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 1, "result": None})

        # When / Then
        with pytest.raises(APIError):
            client.gas_price()
