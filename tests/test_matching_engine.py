from datetime import date
from decimal import Decimal

import pytest

from statement_recon.config import MatchingWeights
from statement_recon.matching.engine import ReconciliationEngine
from statement_recon.models.transaction import MatchType

PRIVACY_LINE = "PwP  Privacy.com Privacycom TN: 5199481     WEB ID:  626060084"


@pytest.fixture
def engine(config):
    return ReconciliationEngine(config)


@pytest.fixture
def amount_only_engine(config):
    """Engine whose fuzzy score ignores dates and descriptions, so candidates tie"""
    config.matching.weights = MatchingWeights(amount=1.0, date=0.0, description=0.0)
    return ReconciliationEngine(config)


class TestReconciliationEngine:
    """Test suite for two-pass transaction matching"""

    def test_exact_match(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 20), "-99.80", payee="Privacy")]
        statement = [make_statement_txn(date(2025, 10, 20), PRIVACY_LINE, "-99.80")]

        results = engine.match(ledger, statement)

        assert len(results) == 1
        assert results[0].match_type == MatchType.EXACT
        assert results[0].confidence == 1.0
        assert results[0].date_delta_days == 0
        assert results[0].amount_delta == 0
        assert results[0].ledger_transaction_id == "t-1"

    def test_fuzzy_match_within_window(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 18), "-99.80", payee="Privacy")]
        statement = [make_statement_txn(date(2025, 10, 20), PRIVACY_LINE, "-99.80")]

        results = engine.match(ledger, statement)

        assert len(results) == 1
        assert results[0].match_type == MatchType.FUZZY
        assert results[0].confidence > 0
        assert results[0].date_delta_days == 2

    def test_fuzzy_confidence_decreases_with_date_delta(
        self, engine, make_ledger_txn, make_statement_txn
    ):
        statement = [make_statement_txn(date(2025, 10, 20), PRIVACY_LINE, "-99.80")]
        confidences = []
        for day in (19, 18, 17):
            ledger = [make_ledger_txn("t-1", date(2025, 10, day), "-99.80", payee="Privacy")]
            confidences.append(engine.match(ledger, statement)[0].confidence)

        assert confidences[0] > confidences[1] > confidences[2] > 0.5

    def test_outside_window_is_unmatched(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 16), "-99.80", payee="Privacy")]
        statement = [make_statement_txn(date(2025, 10, 20), PRIVACY_LINE, "-99.80")]

        results = engine.match(ledger, statement)

        assert [r.match_type for r in results] == [MatchType.UNMATCHED, MatchType.UNMATCHED]

    def test_unrelated_transactions_unmatched(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 15), "-50.00", payee="Apple Store")]
        statement = [make_statement_txn(date(2025, 10, 20), "McDonald's Restaurant", "-12.34")]

        results = engine.match(ledger, statement)

        assert len(results) == 2
        assert all(r.match_type == MatchType.UNMATCHED for r in results)
        assert results[0].ledger_transaction is not None and results[0].statement_transaction is None
        assert results[1].statement_transaction is not None and results[1].ledger_transaction is None
        assert all(r.confidence == 0 for r in results)

    def test_amount_within_tolerance(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 20), "-99.80")]
        statement = [make_statement_txn(date(2025, 10, 20), "Something", "-99.81")]

        results = engine.match(ledger, statement)

        assert results[0].match_type == MatchType.EXACT
        assert results[0].amount_delta == Decimal("-0.01")

    def test_amount_outside_tolerance(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 20), "-99.80")]
        statement = [make_statement_txn(date(2025, 10, 20), "Something", "-99.85")]

        assert all(r.match_type == MatchType.UNMATCHED for r in engine.match(ledger, statement))

    def test_tolerance_override(self, config, make_ledger_txn, make_statement_txn):
        engine = ReconciliationEngine(config, amount_tolerance=Decimal("0.10"))
        ledger = [make_ledger_txn("t-1", date(2025, 10, 20), "-99.80")]
        statement = [make_statement_txn(date(2025, 10, 20), "Something", "-99.85")]

        assert engine.match(ledger, statement)[0].match_type == MatchType.EXACT

    def test_every_transaction_reported_once(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [
            make_ledger_txn("t-1", date(2025, 10, 20), "-99.80", payee="Privacy"),
            make_ledger_txn("t-2", date(2025, 10, 16), "4000.00", payee="Transfer"),
            make_ledger_txn("t-3", date(2025, 10, 1), "-5.00", payee="Coffee"),
        ]
        statement = [
            make_statement_txn(date(2025, 10, 17), "Online Transfer", "4000.00"),
            make_statement_txn(date(2025, 10, 20), PRIVACY_LINE, "-99.80"),
            make_statement_txn(date(2025, 10, 19), "NETFLIX.COM", "-15.49"),
        ]

        results = engine.match(ledger, statement)

        ledger_ids = [r.ledger_transaction.id for r in results if r.ledger_transaction]
        statement_lines = [r.statement_transaction for r in results if r.statement_transaction]
        assert sorted(ledger_ids) == ["t-1", "t-2", "t-3"]
        assert len(statement_lines) == 3
        assert set(statement_lines) == set(statement)
        assert [r.match_type for r in results] == [
            MatchType.EXACT,
            MatchType.FUZZY,
            MatchType.UNMATCHED,
            MatchType.UNMATCHED,
        ]
        assert results[2].ledger_transaction_id == "t-3"
        assert results[3].statement_transaction.description == "NETFLIX.COM"

    def test_statement_line_consumed_once(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [
            make_ledger_txn("t-1", date(2025, 10, 20), "-99.80", payee="Privacy"),
            make_ledger_txn("t-2", date(2025, 10, 20), "-99.80", payee="Privacy"),
        ]
        statement = [make_statement_txn(date(2025, 10, 20), PRIVACY_LINE, "-99.80")]

        results = engine.match(ledger, statement)

        assert [r.match_type for r in results] == [MatchType.EXACT, MatchType.UNMATCHED]
        assert results[0].ledger_transaction_id == "t-1"

    def test_ties_go_to_earlier_statement_line(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 18), "-20.00", payee="Coffee")]
        statement = [
            make_statement_txn(date(2025, 10, 17), "Coffee", "-20.00"),
            make_statement_txn(date(2025, 10, 19), "Coffee", "-20.00"),
        ]

        results = engine.match(ledger, statement)

        assert results[0].match_type == MatchType.FUZZY
        assert results[0].statement_transaction is statement[0]

    def test_ties_go_to_closer_date(self, amount_only_engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 18), "-20.00", payee="Coffee")]
        statement = [
            make_statement_txn(date(2025, 10, 21), "Coffee", "-20.00"),
            make_statement_txn(date(2025, 10, 17), "Coffee", "-20.00"),
        ]

        results = amount_only_engine.match(ledger, statement)

        assert results[0].match_type == MatchType.FUZZY
        assert results[0].confidence == 1.0
        assert results[0].statement_transaction is statement[1]
        assert results[0].date_delta_days == 1

    def test_ties_at_same_distance_go_to_better_description(
        self, amount_only_engine, make_ledger_txn, make_statement_txn
    ):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 18), "-20.00", payee="Privacy")]
        statement = [
            make_statement_txn(date(2025, 10, 19), "Online Transfer", "-20.00"),
            make_statement_txn(date(2025, 10, 17), "Privacy.com Payment", "-20.00"),
        ]

        results = amount_only_engine.match(ledger, statement)

        assert results[0].match_type == MatchType.FUZZY
        assert results[0].statement_transaction is statement[1]
        assert results[0].description_similarity > 0

    def test_memo_similarity_used(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 18), "-20.00", payee="Misc", memo="Netflix")]
        statement = [make_statement_txn(date(2025, 10, 20), "NETFLIX.COM", "-20.00")]

        results = engine.match(ledger, statement)

        assert results[0].description_similarity == 1.0

    def test_deleted_ledger_transactions_ignored(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 20), "-99.80", deleted=True)]
        statement = [make_statement_txn(date(2025, 10, 20), PRIVACY_LINE, "-99.80")]

        results = engine.match(ledger, statement)

        assert len(results) == 1
        assert results[0].ledger_transaction is None

    def test_inputs_not_mutated(self, engine, make_ledger_txn, make_statement_txn):
        ledger = [make_ledger_txn("t-1", date(2025, 10, 20), "-99.80")]
        statement = [make_statement_txn(date(2025, 10, 20), PRIVACY_LINE, "-99.80")]
        ledger_copy, statement_copy = list(ledger), list(statement)

        engine.match(ledger, statement)

        assert ledger == ledger_copy
        assert statement == statement_copy

    def test_empty_inputs(self, engine):
        assert engine.match([], []) == []
