#!/usr/bin/env python3
"""
Data model shared by the award audit components.

Everything here lives for a single audit run and is never persisted.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class AuditError(Exception):
    """Base class for award audit errors"""
    pass


class ConfigError(AuditError):
    """Raised when a target configuration is missing or invalid"""
    pass


class AwardSchemaError(AuditError):
    """Raised when a stored award document fails schema validation"""

    def __init__(self, index: int, detail: str):
        self.index = index
        self.detail = detail
        super().__init__(f"Award document #{index} failed schema validation: {detail}")


@dataclass
class TransferEvent:
    """Decoded ERC-1155 TransferSingle / TransferBatch log"""
    kind: str  # "single" or "batch"
    operator: str
    from_address: str
    to_address: str
    ids: List[int]
    values: List[int]
    tx_hash: str
    block_number: int


@dataclass
class ChainMintRecord:
    token_id: str
    recipient: str
    value: int
    tx_hash: str
    block_number: int
    # filled in later by the denomination resolver
    denomination: Optional[int] = None


@dataclass(frozen=True)
class DatabaseAwardRecord:
    token_id: str
    recipient: str
    denomination: int
    period_number: int
    mint_type: int
    mint_tx_hash: Optional[str] = None
    burned: bool = False


@dataclass
class ReconciliationResult:
    matched: Dict[str, Tuple[List[ChainMintRecord], List[DatabaseAwardRecord]]]
    chain_only: Dict[str, List[ChainMintRecord]]
    db_only: Dict[str, List[DatabaseAwardRecord]]
    matched_count: int
    chain_mint_count: int
    db_total_count: int
    db_active_count: int
    db_burned_count: int
    db_active_total: int
    chain_total: int
    on_chain_only_total: int
    authoritative_total: Optional[int] = None
    chain_only_by_period: "OrderedDict[int, List[ChainMintRecord]]" = field(default_factory=OrderedDict)

    @property
    def chain_only_records(self) -> List[ChainMintRecord]:
        return [record for records in self.chain_only.values() for record in records]

    @property
    def db_only_records(self) -> List[DatabaseAwardRecord]:
        return [record for records in self.db_only.values() for record in records]

    @property
    def total_difference(self) -> Optional[int]:
        """authoritative on-chain total minus db active total (positive: chain ahead)"""
        if self.authoritative_total is None:
            return None
        return self.authoritative_total - self.db_active_total

    @property
    def totals_match(self) -> Optional[bool]:
        difference = self.total_difference
        if difference is None:
            return None
        return difference == 0
