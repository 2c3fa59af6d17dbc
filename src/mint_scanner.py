#!/usr/bin/env python3
"""
Mint Scanner

Walks a block range in fixed-size windows, pulls every log emitted by the
Respect1155 contract, and keeps the transfers that are mints: sent from the
zero address to a real recipient, for any token id other than the fungible
unit (id 0).

Windows are closed intervals [from, min(from + step - 1, to)] and the next
window starts at to + 1, so the range is tiled without overlaps. Mints are
not de-duplicated downstream, which relies on that.
"""

import logging
from typing import Callable, Iterator, List, Optional, Tuple, Union

from audit_models import ZERO_ADDRESS, ChainMintRecord, TransferEvent
from token_id_codec import FUNGIBLE_TOKEN_ID, normalize_token_id

logger = logging.getLogger(__name__)


LATEST_BLOCK = "latest"
DEFAULT_STEP_RANGE = 50_000

BlockSpec = Union[int, str]
WindowObserver = Callable[[int, int], None]


def iter_block_windows(from_block: int, to_block: int, step: int) -> Iterator[Tuple[int, int]]:
    if step < 1:
        raise ValueError(f"step range must be >= 1, got {step}")
    current_from = from_block
    while current_from <= to_block:
        current_to = min(current_from + step - 1, to_block)
        yield current_from, current_to
        current_from = current_to + 1


def is_mint(event: TransferEvent) -> bool:
    zero = ZERO_ADDRESS.lower()
    return event.from_address.lower() == zero and event.to_address.lower() != zero


def mints_from_event(event: TransferEvent) -> List[ChainMintRecord]:
    if not is_mint(event):
        return []
    mints = []
    for token_id, value in zip(event.ids, event.values):
        if token_id == FUNGIBLE_TOKEN_ID:
            continue
        mints.append(ChainMintRecord(
            token_id=normalize_token_id(token_id),
            recipient=event.to_address,
            value=value,
            tx_hash=event.tx_hash,
            block_number=event.block_number,
        ))
    return mints


def parse_block_spec(value: BlockSpec) -> BlockSpec:
    """Accept an int, a decimal string, or the 'latest' sentinel"""
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"block number must be non-negative, got {value}")
        return value
    text = str(value).strip().lower()
    if text == LATEST_BLOCK:
        return LATEST_BLOCK
    try:
        number = int(text)
    except ValueError:
        raise ValueError(f"invalid block: {value!r} (expected a number or '{LATEST_BLOCK}')")
    return parse_block_spec(number)


class MintScanner:
    """Collect mint records from a ledger over a bounded block range"""

    def __init__(self, ledger, step_range: int = DEFAULT_STEP_RANGE, on_window: Optional[WindowObserver] = None):
        if step_range < 1:
            raise ValueError(f"step range must be >= 1, got {step_range}")
        self.ledger = ledger
        self.step_range = step_range
        self.on_window = on_window

    def resolve_to_block(self, to_block: BlockSpec) -> int:
        block = parse_block_spec(to_block)
        if block == LATEST_BLOCK:
            latest = self.ledger.get_block_number()
            logger.debug(f"Resolved '{LATEST_BLOCK}' to block {latest}")
            return latest
        return block

    def scan(self, from_block: int, to_block: BlockSpec = LATEST_BLOCK) -> List[ChainMintRecord]:
        # resolved once so the range does not move while scanning
        end_block = self.resolve_to_block(to_block)
        logger.info(f"Scanning {self.ledger.get_address()} for mints in blocks {from_block}-{end_block}")

        mints: List[ChainMintRecord] = []
        for window_from, window_to in iter_block_windows(from_block, end_block, self.step_range):
            if self.on_window:
                self.on_window(window_from, window_to)
            logs = self.ledger.get_logs(window_from, window_to)
            for log in logs:
                event = self.ledger.parse_log(log)
                if event is None:
                    continue
                mints.extend(mints_from_event(event))

        logger.info(f"Found {len(mints)} mint events")
        return mints
