"""
Shared fixtures for award audit tests.

Raw logs are built with eth_abi / keccak topics so the real decoder in
RespectLedger is exercised.
"""

import logging
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from eth_abi import encode

from audit_models import ChainMintRecord, DatabaseAwardRecord
from respect_ledger import TRANSFER_BATCH_TOPIC, TRANSFER_SINGLE_TOPIC, RespectLedger
from token_id_codec import encode_token_id


CONTRACT = "0x1111111111111111111111111111111111111111"
OPERATOR = "0x2222222222222222222222222222222222222222"
ALICE = "0xAAaAaAaaAaAaAaaAaAAAAAAAAaaaAaAaAaaAaaAa"
BOB = "0xbBbBBBBbbBBBbbbBbbBbbbbBBbBbbbbBbBbbBBbB"


def address_topic(address: str) -> bytes:
    return bytes(12) + bytes.fromhex(address[2:])


def tx_hash(n: int) -> str:
    return "0x" + n.to_bytes(32, "big").hex()


def make_single_log(from_addr: str, to_addr: str, token_id: int, value: int,
                    block: int, tx: Optional[str] = None, operator: str = OPERATOR) -> Dict[str, Any]:
    return {
        "address": CONTRACT,
        "topics": [TRANSFER_SINGLE_TOPIC, address_topic(operator), address_topic(from_addr), address_topic(to_addr)],
        "data": encode(["uint256", "uint256"], [token_id, value]),
        "transactionHash": bytes.fromhex((tx or tx_hash(block))[2:]),
        "blockNumber": block,
    }


def make_batch_log(from_addr: str, to_addr: str, ids: List[int], values: List[int],
                   block: int, tx: Optional[str] = None, operator: str = OPERATOR) -> Dict[str, Any]:
    return {
        "address": CONTRACT,
        "topics": [TRANSFER_BATCH_TOPIC, address_topic(operator), address_topic(from_addr), address_topic(to_addr)],
        "data": encode(["uint256[]", "uint256[]"], [ids, values]),
        "transactionHash": bytes.fromhex((tx or tx_hash(block))[2:]),
        "blockNumber": block,
    }


def award_token_id(period: int, owner: str = ALICE, mint_type: int = 0) -> str:
    return encode_token_id(mint_type, period, owner)


def chain_mint(token_id: str, block: int = 1, recipient: str = ALICE, value: int = 1) -> ChainMintRecord:
    return ChainMintRecord(
        token_id=token_id,
        recipient=recipient,
        value=value,
        tx_hash=tx_hash(block),
        block_number=block,
    )


def db_award(token_id: str, denomination: int, period: int = 1, burned: bool = False,
             mint_tx_hash: Optional[str] = None, recipient: str = ALICE, mint_type: int = 0) -> DatabaseAwardRecord:
    return DatabaseAwardRecord(
        token_id=token_id,
        recipient=recipient,
        denomination=denomination,
        period_number=period,
        mint_type=mint_type,
        mint_tx_hash=mint_tx_hash,
        burned=burned,
    )


def award_document(token_id: str, denomination: int = 10, period: int = 1, mint_type: int = 0,
                   recipient: str = ALICE, burn: Optional[Dict[str, Any]] = None,
                   mint_tx_hash: Optional[str] = None) -> Dict[str, Any]:
    properties: Dict[str, Any] = {
        "tokenId": token_id,
        "recipient": recipient,
        "mintType": mint_type,
        "denomination": denomination,
        "periodNumber": period,
        "burn": burn,
    }
    if mint_tx_hash is not None:
        properties["mintTxHash"] = mint_tx_hash
    return {"name": "Respect Award", "properties": properties}


class FakeLedger:
    """In-memory stand-in for RespectLedger"""

    def __init__(self, logs: Optional[List[Dict[str, Any]]] = None, head: int = 1_000,
                 values: Optional[Dict[str, int]] = None, total: Optional[int] = None):
        self.logs = logs or []
        self.head = head
        self.values = {k.lower(): v for k, v in (values or {}).items()}
        self.total = total
        self.windows: List[tuple] = []
        self.block_number_calls = 0
        self.value_calls: List[str] = []
        self.web3 = MagicMock()
        self._decoder = RespectLedger(MagicMock(), CONTRACT)

    def get_address(self) -> str:
        return CONTRACT

    def get_block_number(self) -> int:
        self.block_number_calls += 1
        return self.head

    def get_logs(self, from_block: int, to_block: int) -> List[Dict[str, Any]]:
        self.windows.append((from_block, to_block))
        return [log for log in self.logs if from_block <= log["blockNumber"] <= to_block]

    def parse_log(self, log):
        return self._decoder.parse_log(log)

    def value_of_token(self, token_id: str) -> int:
        self.value_calls.append(token_id)
        key = token_id.lower()
        if key not in self.values:
            raise RuntimeError("execution reverted: unknown token")
        return self.values[key]

    def total_respect(self) -> int:
        if self.total is None:
            raise RuntimeError("execution reverted")
        return self.total


@pytest.fixture
def mock_web3():
    web3 = MagicMock()
    web3.eth.block_number = 12_345
    return web3


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Drop handlers installed by setup_logging so they do not outlive the test's streams"""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in before and not type(handler).__module__.startswith("_pytest"):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
