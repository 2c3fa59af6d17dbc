#!/usr/bin/env python3
"""
Report rendering for award audit results.

All functions here are pure: they take a ReconciliationResult (or plain
values) and return text or a JSON-serialisable dict.
"""

from typing import Any, Dict, List, Optional

from audit_models import ChainMintRecord, DatabaseAwardRecord, ReconciliationResult
from token_id_codec import decode_token_id


BANNER_WIDTH = 60


def _denomination_text(value: Optional[int]) -> str:
    return "?" if value is None else str(value)


def render_header(target_id: str, display_name: Optional[str] = None) -> str:
    title = f"Checking target: {target_id}"
    if display_name and display_name != target_id:
        title += f" ({display_name})"
    rule = "=" * BANNER_WIDTH
    return f"\n{rule}\n{title}\n{rule}"


def render_connection(contract: str, rpc_url: str, db_name: str) -> str:
    return "\n".join([
        f"Contract: {contract}",
        f"RPC: {rpc_url}",
        f"MongoDB: {db_name}",
    ])


def _render_totals(result: ReconciliationResult) -> List[str]:
    authoritative = result.authoritative_total
    lines = [
        "",
        "--- Results ---",
        f"On-chain totalRespect(): {authoritative if authoritative is not None else 'N/A'}",
        f"DB active awards denomination sum: {result.db_active_total}",
    ]
    difference = result.total_difference
    if difference is not None:
        if difference != 0:
            lines.append(f"  ⚠️  MISMATCH: on-chain totalRespect - DB active sum = {difference:+d}")
        else:
            lines.append("  ✅ Totals match")
    return lines


def _render_chain_only(result: ReconciliationResult) -> List[str]:
    records = result.chain_only_records
    if not records:
        return ["", "✅ All on-chain mints are present in DB"]

    lines = [
        "",
        f"⚠️  ON-CHAIN MINTS NOT IN DB ({len(records)}):",
        f"  Total denomination of missing awards: {result.on_chain_only_total}",
    ]
    for period, mints in result.chain_only_by_period.items():
        period_total = sum(m.denomination or 0 for m in mints)
        lines.append("")
        lines.append(f"  Period {period} ({len(mints)} mints, total denom: {period_total}):")
        for mint in mints:
            fields = decode_token_id(mint.token_id)
            lines.append(f"    tokenId: {mint.token_id}")
            lines.append(
                f"      recipient: {fields.owner}, denomination: {_denomination_text(mint.denomination)}, "
                f"mintType: {fields.mint_type}"
            )
            lines.append(f"      tx: {mint.tx_hash} (block {mint.block_number})")
    return lines


def _render_db_only(result: ReconciliationResult) -> List[str]:
    awards = result.db_only_records
    if not awards:
        return ["✅ All DB awards have corresponding on-chain events"]

    lines = ["", f"⚠️  DB AWARDS NOT ON-CHAIN ({len(awards)}):"]
    for award in awards:
        lines.append(f"    tokenId: {award.token_id}")
        lines.append(
            f"      recipient: {award.recipient}, denomination: {award.denomination}, "
            f"period: {award.period_number}, mintType: {award.mint_type}, burned: {award.burned}"
        )
        if award.mint_tx_hash:
            lines.append(f"      mintTxHash: {award.mint_tx_hash}")
    return lines


def render_report(result: ReconciliationResult) -> str:
    lines = [
        f"On-chain mint events found: {result.chain_mint_count}",
        f"DB awards total: {result.db_total_count} "
        f"(active: {result.db_active_count}, burned: {result.db_burned_count})",
    ]
    lines.extend(_render_totals(result))
    lines.append("")
    lines.append(f"Matched token IDs: {result.matched_count}")
    lines.extend(_render_chain_only(result))
    lines.extend(_render_db_only(result))
    return "\n".join(lines)


def _chain_mint_to_dict(mint: ChainMintRecord) -> Dict[str, Any]:
    fields = decode_token_id(mint.token_id)
    return {
        "token_id": mint.token_id,
        "recipient": fields.owner,
        "to": mint.recipient,
        "value": mint.value,
        "denomination": mint.denomination,
        "mint_type": fields.mint_type,
        "period_number": fields.period_number,
        "tx_hash": mint.tx_hash,
        "block_number": mint.block_number,
    }


def _db_award_to_dict(award: DatabaseAwardRecord) -> Dict[str, Any]:
    return {
        "token_id": award.token_id,
        "recipient": award.recipient,
        "denomination": award.denomination,
        "period_number": award.period_number,
        "mint_type": award.mint_type,
        "burned": award.burned,
        "mint_tx_hash": award.mint_tx_hash,
    }


def report_to_dict(result: ReconciliationResult, target_id: Optional[str] = None) -> Dict[str, Any]:
    periods = []
    for period, mints in result.chain_only_by_period.items():
        periods.append({
            "period_number": period,
            "count": len(mints),
            "total_denomination": sum(m.denomination or 0 for m in mints),
            "mints": [_chain_mint_to_dict(m) for m in mints],
        })

    return {
        "target": target_id,
        "counts": {
            "chain_mints": result.chain_mint_count,
            "db_awards": result.db_total_count,
            "db_active": result.db_active_count,
            "db_burned": result.db_burned_count,
            "matched": result.matched_count,
            "chain_only": len(result.chain_only_records),
            "db_only": len(result.db_only_records),
        },
        "totals": {
            "authoritative_total": result.authoritative_total,
            "db_active_total": result.db_active_total,
            "chain_total": result.chain_total,
            "on_chain_only_total": result.on_chain_only_total,
            "difference": result.total_difference,
            "match": result.totals_match,
        },
        "chain_only_by_period": periods,
        "db_only": [_db_award_to_dict(a) for a in result.db_only_records],
    }
