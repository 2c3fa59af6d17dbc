#!/usr/bin/env python3
"""
Respect1155 Ledger Reader

Read-only access to a Respect1155 (ERC-1155) contract: raw log retrieval,
TransferSingle / TransferBatch decoding, and the two view calls the award
audit needs (`valueOfToken`, `totalRespect`).
"""

import logging
from typing import Any, Dict, List, Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from audit_models import TransferEvent
from token_id_codec import token_id_to_bytes

logger = logging.getLogger(__name__)


TRANSFER_SINGLE_SIGNATURE = "TransferSingle(address,address,address,uint256,uint256)"
TRANSFER_BATCH_SIGNATURE = "TransferBatch(address,address,address,uint256[],uint256[])"

TRANSFER_SINGLE_TOPIC = bytes(Web3.keccak(text=TRANSFER_SINGLE_SIGNATURE))
TRANSFER_BATCH_TOPIC = bytes(Web3.keccak(text=TRANSFER_BATCH_SIGNATURE))

RESPECT1155_ABI = [
    {
        "inputs": [{"internalType": "TokenId", "name": "tokenId", "type": "bytes32"}],
        "name": "valueOfToken",
        "outputs": [{"internalType": "uint64", "name": "", "type": "uint64"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "totalRespect",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return bytes.fromhex(value[2:] if value.startswith("0x") else value)
    raise TypeError(f"expected bytes or hex string, got {type(value).__name__}")


def _as_hex(value: Any) -> str:
    if isinstance(value, str):
        return value if value.startswith("0x") else "0x" + value
    return "0x" + _as_bytes(value).hex()


def _topic_to_address(topic: Any) -> str:
    return Web3.to_checksum_address("0x" + _as_bytes(topic)[-20:].hex())


class RespectLedger:
    """Contract-reading capability over a single Respect1155 deployment"""

    def __init__(self, web3: Web3, address: str):
        self.web3 = web3
        self.address = Web3.to_checksum_address(address)
        self.contract = web3.eth.contract(address=self.address, abi=RESPECT1155_ABI)

    def get_address(self) -> str:
        return self.address

    def get_block_number(self) -> int:
        return int(self.web3.eth.block_number)

    def get_logs(self, from_block: int, to_block: int) -> List[Dict[str, Any]]:
        # no topic filter: both transfer shapes come back in one request
        logs = self.web3.eth.get_logs({
            "fromBlock": from_block,
            "toBlock": to_block,
            "address": self.address,
        })
        logger.debug(f"Retrieved {len(logs)} logs for blocks {from_block}-{to_block}")
        return list(logs)

    def parse_log(self, log: Dict[str, Any]) -> Optional[TransferEvent]:
        """Decode a raw log as a transfer event, or None if it is neither transfer shape"""
        topics = log.get("topics") or []
        if len(topics) != 4:
            return None

        topic0 = _as_bytes(topics[0])
        if topic0 == TRANSFER_SINGLE_TOPIC:
            kind, data_types = "single", ["uint256", "uint256"]
        elif topic0 == TRANSFER_BATCH_TOPIC:
            kind, data_types = "batch", ["uint256[]", "uint256[]"]
        else:
            return None

        try:
            first, second = decode(data_types, _as_bytes(log.get("data", b"")))
        except (DecodingError, ValueError, TypeError) as exc:
            logger.debug(f"Could not decode {kind} transfer data in tx {log.get('transactionHash')}: {exc}")
            return None

        if kind == "single":
            ids, values = [int(first)], [int(second)]
        else:
            ids, values = [int(i) for i in first], [int(v) for v in second]

        return TransferEvent(
            kind=kind,
            operator=_topic_to_address(topics[1]),
            from_address=_topic_to_address(topics[2]),
            to_address=_topic_to_address(topics[3]),
            ids=ids,
            values=values,
            tx_hash=_as_hex(log.get("transactionHash", b"")),
            block_number=int(log.get("blockNumber", 0)),
        )

    def value_of_token(self, token_id: str) -> int:
        return int(self.contract.functions.valueOfToken(token_id_to_bytes(token_id)).call())

    def total_respect(self) -> int:
        return int(self.contract.functions.totalRespect().call())
