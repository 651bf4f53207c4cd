"""
JSON-RPC traffic through the client's requests session, answered by requests_mock.
"""
import pytest
from web3.exceptions import Web3Exception

from txsubmit_sdk.payloads import PRESETS
from tests.test_helpers import create_test_client, TEST_RPC_URL, TEST_CHAIN_ID

RESULTS = {
    "eth_blockNumber": hex(4242),
    "eth_chainId": hex(TEST_CHAIN_ID),
    "eth_getTransactionCount": hex(5),
    "eth_sendRawTransaction": "0x" + "ab" * 32,
}


def _rpc_callback(request, context):
    body = request.json()
    if body["method"] == "eth_estimateGas":
        return {
            "jsonrpc": "2.0",
            "id": body["id"],
            "error": {"code": 3, "message": "execution reverted: insufficient deposit"},
        }
    return {"jsonrpc": "2.0", "id": body["id"], "result": RESULTS.get(body["method"], "0x0")}


@pytest.fixture
def node(monkeypatch, requests_mock):
    # Drop the autouse make_request stub so the real HTTPProvider is used
    monkeypatch.undo()
    requests_mock.post(TEST_RPC_URL, json=_rpc_callback)
    return requests_mock


def _methods(node):
    return [r.json()["method"] for r in node.request_history]


def test_node_queries_go_through_session(node):
    client = create_test_client(timeout=7)

    assert client.block_number() == 4242
    assert client.chain_id() == TEST_CHAIN_ID

    assert "eth_blockNumber" in _methods(node)
    assert "eth_chainId" in _methods(node)
    assert node.last_request.timeout == 7


def test_revert_during_estimation_stops_submission(node):
    client = create_test_client()

    with pytest.raises(Web3Exception, match="insufficient deposit"):
        client.submit(PRESETS["withdraw"].to_request())

    assert "eth_estimateGas" in _methods(node)
    assert "eth_sendRawTransaction" not in _methods(node)
