#!/usr/bin/env python3
"""
Reconciliation Engine

Compares on-chain mint records against database award records by token id.

Every token id seen on either side lands in exactly one partition:
    matched     present on chain and in the database
    chain_only  minted on chain but never recorded in the database
    db_only     recorded in the database with no mint in the scanned range

Matched ids are not compared field by field; the two sides are recorded by
different authorities, so only presence and the aggregate totals are checked.
Burned database awards take part in id matching but are left out of the
active total.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, TypeVar

from audit_models import ChainMintRecord, DatabaseAwardRecord, ReconciliationResult
from denomination_resolver import resolve_denominations
from token_id_codec import decode_token_id

logger = logging.getLogger(__name__)

T = TypeVar("T")


def group_by_token_id(records: Iterable[T]) -> "OrderedDict[str, List[T]]":
    grouped: "OrderedDict[str, List[T]]" = OrderedDict()
    for record in records:
        grouped.setdefault(record.token_id.lower(), []).append(record)
    return grouped


def group_by_period(records: Iterable[ChainMintRecord]) -> "OrderedDict[int, List[ChainMintRecord]]":
    """Periods ascending; records keep their discovery order within a period"""
    by_period: Dict[int, List[ChainMintRecord]] = {}
    for record in records:
        period = decode_token_id(record.token_id).period_number
        by_period.setdefault(period, []).append(record)
    return OrderedDict((period, by_period[period]) for period in sorted(by_period))


def db_active_total(db_records: Iterable[DatabaseAwardRecord]) -> int:
    return sum(record.denomination for record in db_records if not record.burned)


def chain_total(chain_records: Iterable[ChainMintRecord]) -> int:
    return sum(record.denomination or 0 for record in chain_records)


def read_authoritative_total(ledger) -> Optional[int]:
    try:
        return int(ledger.total_respect())
    except Exception as exc:
        logger.warning(f"Could not read totalRespect(): {exc}")
        return None


def reconcile(chain_records: List[ChainMintRecord], db_records: List[DatabaseAwardRecord],
              ledger=None) -> ReconciliationResult:
    """
    Partition token ids and compute totals.

    When a ledger is given, chain-only records get their denomination from
    `valueOfToken` and the authoritative `totalRespect()` is read once.
    """
    chain_by_id = group_by_token_id(chain_records)
    db_by_id = group_by_token_id(db_records)

    all_ids = list(chain_by_id)
    all_ids.extend(token_id for token_id in db_by_id if token_id not in chain_by_id)

    matched = OrderedDict()
    chain_only = OrderedDict()
    db_only = OrderedDict()
    matched_count = 0

    for token_id in all_ids:
        chain_entries = chain_by_id.get(token_id, [])
        db_entries = db_by_id.get(token_id, [])
        if chain_entries and not db_entries:
            chain_only[token_id] = chain_entries
        elif db_entries and not chain_entries:
            db_only[token_id] = db_entries
        else:
            matched[token_id] = (chain_entries, db_entries)
            matched_count += len(chain_entries)

    chain_only_records = [record for records in chain_only.values() for record in records]
    on_chain_only_total = 0
    authoritative_total = None
    if ledger is not None:
        on_chain_only_total = resolve_denominations(ledger, chain_only_records)
        authoritative_total = read_authoritative_total(ledger)

    burned_count = sum(1 for record in db_records if record.burned)

    result = ReconciliationResult(
        matched=matched,
        chain_only=chain_only,
        db_only=db_only,
        matched_count=matched_count,
        chain_mint_count=len(chain_records),
        db_total_count=len(db_records),
        db_active_count=len(db_records) - burned_count,
        db_burned_count=burned_count,
        db_active_total=db_active_total(db_records),
        chain_total=chain_total(chain_records),
        on_chain_only_total=on_chain_only_total,
        authoritative_total=authoritative_total,
        chain_only_by_period=group_by_period(chain_only_records),
    )

    logger.info(
        "Reconciled %s token ids | matched: %s | chain-only: %s | db-only: %s",
        len(all_ids),
        len(matched),
        len(chain_only),
        len(db_only),
    )
    return result
