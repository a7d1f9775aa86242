"""
Churn factor tests.

Run with: pytest tests/test_factors.py -v
"""

import random

from crm.scoring import ChurnScorer, normalize_factor
from crm.scoring.config import DEFAULT_NEUTRAL_FACTORS


class TestChurnFactors:
    """Each rule contributes its phrase in evaluation order."""

    def test_no_purchase_history(self, scorer, make_customer):
        customer = make_customer(total_spent=0)
        assert scorer.compute_churn_factors(customer, [], []) == ["No purchase history"]

    def test_inactive_for_six_months(self, scorer, make_customer, days_ago):
        customer = make_customer(total_spent=25000, last_order_date=days_ago(200))
        assert scorer.compute_churn_factors(customer, [], []) == [
            "Inactive for 6+ months",
            "No active opportunities despite high spend",
        ]

    def test_no_orders_in_three_months(self, scorer, make_customer, days_ago):
        customer = make_customer(total_spent=15000, last_order_date=days_ago(100))
        assert scorer.compute_churn_factors(customer, [], []) == ["No orders in past 3 months"]

    def test_unresolved_critical_issue(self, scorer, make_customer, make_ticket, days_ago):
        customer = make_customer(total_spent=15000, last_order_date=days_ago(10))
        tickets = [make_ticket(status="in progress", priority="high")]
        assert scorer.compute_churn_factors(customer, [], tickets) == ["Unresolved critical issues"]

    def test_multiple_unresolved_requests(self, scorer, make_customer, make_ticket, days_ago):
        customer = make_customer(total_spent=15000, last_order_date=days_ago(10))
        tickets = [make_ticket(status="open"), make_ticket(status="in progress")]
        assert scorer.compute_churn_factors(customer, [], tickets) == ["Multiple unresolved support requests"]

    def test_deal_losses_need_more_than_one(self, scorer, make_customer, make_deal, days_ago):
        customer = make_customer(total_spent=15000, last_order_date=days_ago(10))

        one_lost = [make_deal(stage="lost"), make_deal(stage="lead")]
        two_lost = [make_deal(stage="lost"), make_deal(stage="lost"), make_deal(stage="lead")]

        assert "Recent deal losses (1)" not in scorer.compute_churn_factors(customer, one_lost, [])
        assert "Recent deal losses (2)" in scorer.compute_churn_factors(customer, two_lost, [])

    def test_low_value_inactive_account(self, scorer, make_customer, days_ago):
        customer = make_customer(status="inactive", total_spent=5000, last_order_date=days_ago(10))
        assert scorer.compute_churn_factors(customer, [], []) == ["Low value & inactive account"]

    def test_multiple_support_interactions(self, scorer, make_customer, make_ticket, days_ago):
        customer = make_customer(total_spent=15000, last_order_date=days_ago(10))
        tickets = [make_ticket(status="resolved") for _ in range(3)] + [make_ticket(status="open", priority="low")]
        assert scorer.compute_churn_factors(customer, [], tickets) == ["Multiple support interactions"]

    def test_possible_competitor_engagement(self, scorer, make_customer, make_deal, days_ago):
        customer = make_customer(total_spent=15000, last_order_date=days_ago(70))
        deals = [make_deal(stage="lost"), make_deal(stage="qualified")]
        assert scorer.compute_churn_factors(customer, deals, []) == ["Possible competitor engagement"]

    def test_factors_keep_evaluation_order(self, scorer, make_customer, make_deal, make_ticket, days_ago):
        customer = make_customer(status="inactive", total_spent=7800, last_order_date=days_ago(260))
        deals = [make_deal(stage="lost"), make_deal(stage="lost")]
        tickets = [make_ticket(status="open", priority="high"), make_ticket(status="in progress")]

        assert scorer.compute_churn_factors(customer, deals, tickets) == [
            "Inactive for 6+ months",
            "Unresolved critical issues",
            "Recent deal losses (2)",
            "Low value & inactive account",
            "Possible competitor engagement",
        ]


class TestNeutralFactors:
    """A healthy customer gets exactly one neutral phrase."""

    def test_deterministic_neutral_factor(self, scorer, make_customer, make_deal, days_ago):
        customer = make_customer(total_spent=15000, last_order_date=days_ago(10))
        deals = [make_deal(stage="proposal")]
        assert scorer.compute_churn_factors(customer, deals, []) == ["Regular engagement patterns"]

    def test_random_neutral_factor(self, make_customer, make_deal, days_ago, clock):
        scorer = ChurnScorer(rng=random.Random(3), clock=clock)
        customer = make_customer(total_spent=15000, last_order_date=days_ago(10))

        factors = scorer.compute_churn_factors(customer, [make_deal(stage="proposal")], [])

        assert len(factors) == 1
        assert factors[0] in DEFAULT_NEUTRAL_FACTORS
        assert scorer.is_neutral(factors[0])


class TestNormalizeFactor:
    def test_strips_count(self):
        assert normalize_factor("Recent deal losses (3)") == "Recent deal losses"

    def test_leaves_plain_factor(self):
        assert normalize_factor("Inactive for 6+ months") == "Inactive for 6+ months"
