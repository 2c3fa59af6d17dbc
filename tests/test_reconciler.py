"""
Tests for the reconciliation engine.

Tests cover:
- Strict partition of token ids into matched / chain-only / db-only
- Denomination enrichment of chain-only mints
- Active total and burned awards
- Authoritative total comparison
"""

from dataclasses import replace

import pytest

from denomination_resolver import resolve_denomination, resolve_denominations
from reconciler import db_active_total, group_by_period, reconcile

from conftest import BOB, FakeLedger, award_token_id, chain_mint, db_award


# =============================================================
# TEST: Partitioning
# =============================================================

class TestPartition:

    def test_strict_partition_of_id_union(self):
        shared = award_token_id(1)
        chain_only_id = award_token_id(2)
        db_only_id = award_token_id(3)
        chain = [chain_mint(shared, block=1), chain_mint(chain_only_id, block=2)]
        db = [db_award(shared, 5), db_award(db_only_id, 7)]

        result = reconcile(chain, db)

        partitions = [set(result.matched), set(result.chain_only), set(result.db_only)]
        union = {shared, chain_only_id, db_only_id}
        assert set().union(*partitions) == union
        assert sum(len(p) for p in partitions) == len(union)
        assert set(result.matched) == {shared}
        assert set(result.chain_only) == {chain_only_id}
        assert set(result.db_only) == {db_only_id}

    def test_case_insensitive_matching(self):
        token_id = award_token_id(1)
        result = reconcile([chain_mint(token_id.upper().replace("0X", "0x"))], [db_award(token_id, 1)])

        assert len(result.matched) == 1
        assert not result.chain_only
        assert not result.db_only

    def test_burned_award_still_matches_chain_mint(self):
        token_id = award_token_id(1)
        result = reconcile([chain_mint(token_id)], [db_award(token_id, 4, burned=True)])

        assert len(result.matched) == 1
        assert result.db_active_total == 0

    def test_burned_orphan_reported_as_db_only(self):
        token_id = award_token_id(1)
        result = reconcile([], [db_award(token_id, 4, burned=True)])
        assert [a.burned for a in result.db_only_records] == [True]

    def test_matched_count_counts_chain_entries(self):
        token_id = award_token_id(1)
        result = reconcile([chain_mint(token_id, block=1), chain_mint(token_id, block=2)], [db_award(token_id, 1)])
        assert result.matched_count == 2

    def test_empty_inputs(self):
        result = reconcile([], [])
        assert result.matched_count == 0
        assert not result.chain_only and not result.db_only
        assert result.db_active_total == 0
        assert result.chain_total == 0
        assert result.total_difference is None


# =============================================================
# TEST: Denomination enrichment
# =============================================================

class TestDenominations:

    def test_only_chain_only_records_are_resolved(self):
        shared = award_token_id(1)
        missing = award_token_id(2)
        ledger = FakeLedger(values={shared: 99, missing: 10})

        result = reconcile([chain_mint(shared), chain_mint(missing)], [db_award(shared, 99)], ledger)

        assert ledger.value_calls == [missing]
        assert result.on_chain_only_total == 10
        assert result.chain_total == 10

    def test_lookup_failure_leaves_denomination_unknown(self):
        missing = award_token_id(2)
        ledger = FakeLedger(values={})

        result = reconcile([chain_mint(missing)], [], ledger)

        assert result.chain_only_records[0].denomination is None
        assert result.on_chain_only_total == 0
        assert result.chain_total == 0

    def test_resolve_denomination_sets_record(self):
        token_id = award_token_id(1)
        mint = chain_mint(token_id)
        assert resolve_denomination(FakeLedger(values={token_id: 3}), mint) == 3
        assert mint.denomination == 3

    def test_resolve_denominations_sums_resolved(self):
        known, unknown = award_token_id(1), award_token_id(2)
        mints = [chain_mint(known), chain_mint(unknown)]
        assert resolve_denominations(FakeLedger(values={known: 8}), mints) == 8
        assert [m.denomination for m in mints] == [8, None]


# =============================================================
# TEST: Period grouping
# =============================================================

class TestPeriodGrouping:

    def test_periods_sorted_with_block_order_kept(self):
        p5_first = chain_mint(award_token_id(5), block=1)
        p2 = chain_mint(award_token_id(2), block=2)
        p5_second = chain_mint(award_token_id(5, owner=BOB), block=3)

        grouped = group_by_period([p5_first, p2, p5_second])

        assert list(grouped) == [2, 5]
        assert grouped[5] == [p5_first, p5_second]

    def test_chain_only_grouped_by_period(self):
        token_id = award_token_id(3)
        ledger = FakeLedger(values={token_id: 10})

        result = reconcile([chain_mint(token_id)], [], ledger)

        assert list(result.chain_only_by_period) == [3]
        assert result.chain_only_by_period[3][0].denomination == 10
        assert result.on_chain_only_total == 10


# =============================================================
# TEST: Totals
# =============================================================

class TestTotals:

    def test_active_total_excludes_burned(self):
        awards = [db_award(award_token_id(1), 5), db_award(award_token_id(2), 7, burned=True)]
        assert db_active_total(awards) == 5

    @pytest.mark.parametrize("index", [0, 1, 2])
    def test_flipping_burned_changes_total_by_denomination(self, index):
        awards = [db_award(award_token_id(p), d) for p, d in ((1, 3), (2, 11), (3, 40))]
        before = db_active_total(awards)

        flipped = list(awards)
        flipped[index] = replace(awards[index], burned=True)

        assert before - db_active_total(flipped) == awards[index].denomination

    def test_counts(self):
        awards = [db_award(award_token_id(1), 5), db_award(award_token_id(2), 7, burned=True)]
        result = reconcile([], awards)
        assert (result.db_total_count, result.db_active_count, result.db_burned_count) == (2, 1, 1)

    def test_authoritative_mismatch(self):
        token_id = award_token_id(1)
        ledger = FakeLedger(total=100)

        result = reconcile([chain_mint(token_id)], [db_award(token_id, 90)], ledger)

        assert result.authoritative_total == 100
        assert result.db_active_total == 90
        assert result.total_difference == 10
        assert result.totals_match is False

    def test_authoritative_match(self):
        token_id = award_token_id(1)
        result = reconcile([chain_mint(token_id)], [db_award(token_id, 90)], FakeLedger(total=90))
        assert result.total_difference == 0
        assert result.totals_match is True

    def test_authoritative_read_failure_omitted(self):
        token_id = award_token_id(1)
        result = reconcile([chain_mint(token_id)], [db_award(token_id, 90)], FakeLedger(total=None))

        assert result.authoritative_total is None
        assert result.total_difference is None
        assert result.totals_match is None

    def test_large_totals_stay_exact(self):
        big = 2 ** 200
        awards = [db_award(award_token_id(1), big), db_award(award_token_id(2), 1)]
        result = reconcile([], awards, FakeLedger(total=big + 3))
        assert result.total_difference == 2
