#!/usr/bin/env python3
"""
Look up the authoritative denomination of minted tokens from the contract.
"""

import logging
from typing import Iterable, Optional

from audit_models import ChainMintRecord

logger = logging.getLogger(__name__)


def resolve_denomination(ledger, record: ChainMintRecord) -> Optional[int]:
    # a token burned since minting is unknown to the contract; leave it unset
    try:
        record.denomination = int(ledger.value_of_token(record.token_id))
    except Exception as exc:
        logger.debug(f"valueOfToken failed for {record.token_id}: {exc}")
        record.denomination = None
    return record.denomination


def resolve_denominations(ledger, records: Iterable[ChainMintRecord]) -> int:
    """Resolve each record in order; returns the sum of the resolved values"""
    total = 0
    unresolved = 0
    for record in records:
        denomination = resolve_denomination(ledger, record)
        if denomination is None:
            unresolved += 1
        else:
            total += denomination
    if unresolved:
        logger.warning(f"Could not resolve denomination for {unresolved} token(s)")
    return total
