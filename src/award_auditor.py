#!/usr/bin/env python3
"""
Award Auditor

Checks consistency between on-chain Respect1155 mint events and the awards
stored in the ornode MongoDB database, and prints the discrepancies.

For each target:
1. scan the contract's logs for mints over [from-block, to-block]
2. load every award document from the database (schema validated)
3. reconcile by token id, resolving denominations for on-chain-only mints
4. print the report

Targets are audited one after another; a failure on one target is logged
and the remaining targets still run.

Usage:
    awardwatch [targets...] [--from-block N] [--to-block N|latest] [--step-range N]
               [--rpc-url URL] [--json]
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple

from audit_models import ReconciliationResult
from award_store import MongoAwardStore
from config_manager import ALL_TARGETS, ConfigManager
from logger_utils import setup_logging
from mint_scanner import MintScanner, parse_block_spec
from reconciler import reconcile
from report_renderer import render_connection, render_header, render_report, report_to_dict
from respect_ledger import RespectLedger
from rpc_failover import EVMProviderPool, disconnect

logger = logging.getLogger(__name__)


@dataclass
class TargetOutcome:
    target_id: str
    result: Optional[ReconciliationResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AwardAuditor:
    """Audit a single configured target"""

    def __init__(
        self,
        config_manager: ConfigManager,
        target_id: str,
        from_block: Optional[int] = None,
        to_block: Optional[str] = None,
        step_range: Optional[int] = None,
        rpc_override: Optional[str] = None,
        out: Optional[TextIO] = None,
        quiet: bool = False,
        store_factory: Optional[Callable[[str, str], Any]] = None,
    ):
        self.config_manager = config_manager
        self.target_id = target_id
        self.from_block = from_block if from_block is not None else config_manager.get_from_block()
        self.to_block = parse_block_spec(to_block if to_block is not None else config_manager.get_to_block())
        self.step_range = step_range if step_range is not None else config_manager.get_step_range()
        if self.step_range < 1:
            raise ValueError(f"step range must be >= 1, got {self.step_range}")
        self.rpc_override = rpc_override
        self.out = out if out is not None else sys.stdout
        self.quiet = quiet
        self.store_factory = store_factory or MongoAwardStore

    def _print(self, text: str) -> None:
        if not self.quiet:
            print(text, file=self.out)

    def _log_window(self, window_from: int, window_to: int) -> None:
        logger.info(f"Querying blocks {window_from}-{window_to}...")

    def connect_ledger(self, contract_address: str) -> Tuple[RespectLedger, str]:
        pool = EVMProviderPool(self.config_manager.get_rpc_urls(self.target_id, self.rpc_override))
        web3, rpc_url = pool.ensure_connected()
        return RespectLedger(web3, contract_address), rpc_url

    def audit(self, ledger, store) -> ReconciliationResult:
        scanner = MintScanner(ledger, step_range=self.step_range, on_window=self._log_window)
        chain_mints = scanner.scan(self.from_block, self.to_block)
        db_awards = store.load_awards()
        return reconcile(chain_mints, db_awards, ledger)

    def run(self) -> ReconciliationResult:
        target = self.config_manager.require_valid_target(self.target_id)
        self._print(render_header(self.target_id, self.config_manager.get_display_name(self.target_id)))

        ledger, rpc_url = self.connect_ledger(target['respect_contract'])
        try:
            self._print(render_connection(ledger.get_address(), rpc_url, target['mongo_db']))
            with self.store_factory(target['mongo_url'], target['mongo_db']) as store:
                result = self.audit(ledger, store)
        finally:
            disconnect(ledger.web3)

        self._print("")
        self._print(render_report(result))
        return result


def run_targets(config_manager: ConfigManager, target_ids: List[str], **auditor_kwargs) -> List[TargetOutcome]:
    outcomes = []
    for target_id in target_ids:
        try:
            auditor = AwardAuditor(config_manager, target_id, **auditor_kwargs)
            outcomes.append(TargetOutcome(target_id, result=auditor.run()))
        except Exception as exc:
            logger.exception(f"Error checking target {target_id}: {exc}")
            outcomes.append(TargetOutcome(target_id, error=str(exc)))
    return outcomes


def outcomes_to_json(outcomes: List[TargetOutcome]) -> str:
    documents: List[Dict[str, Any]] = []
    for outcome in outcomes:
        if outcome.ok:
            documents.append(report_to_dict(outcome.result, outcome.target_id))
        else:
            documents.append({"target": outcome.target_id, "error": outcome.error})
    return json.dumps(documents, indent=2)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="awardwatch",
        description=(
            "Check consistency between on-chain Respect mint events and awards "
            "stored in the ornode DB. Outputs discrepancies."
        ),
    )
    parser.add_argument(
        "targets",
        nargs="*",
        default=[ALL_TARGETS],
        help=f"Target ids to check. '{ALL_TARGETS}' stands for every configured target",
    )
    parser.add_argument("-f", "--from-block", type=int, help="From block (default: config audit.from_block or 0)")
    parser.add_argument("-t", "--to-block", type=str, help="To block number or 'latest' (default: latest)")
    parser.add_argument("-s", "--step-range", type=int, help="Block range per log query (default: 50000)")
    parser.add_argument("-r", "--rpc-url", type=str, help="Override RPC URL")
    parser.add_argument("--config-file", type=str, help="Path to config JSON (overrides AWARDWATCH_CONFIG)")
    parser.add_argument("--json", action="store_true", help="Print a JSON report instead of text")
    parser.add_argument("--log-file", type=str, help="Also write debug logs to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-color", action="store_true", help="Disable colored logs")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, no_color=args.no_color, log_file=args.log_file)

    try:
        config_manager = ConfigManager(args.config_file)
        target_ids = config_manager.get_target_ids(args.targets)
    except Exception as exc:
        logger.error(f"Failed to load configuration: {exc}")
        return 1

    if not target_ids:
        logger.warning("No targets configured")
        return 0

    outcomes = run_targets(
        config_manager,
        target_ids,
        from_block=args.from_block,
        to_block=args.to_block,
        step_range=args.step_range,
        rpc_override=args.rpc_url,
        quiet=args.json,
    )

    if args.json:
        print(outcomes_to_json(outcomes))

    failed = [o.target_id for o in outcomes if not o.ok]
    if failed:
        logger.error(f"Audit failed for {len(failed)} target(s): {', '.join(failed)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
