"""
Churn analytics tests over the sample data set.

Deterministic scores of the seeded customers at the fixed clock:
Rahul 63, Arjun 58, Emily 27, Olivia 22, Sarah 13, Michael 0, David 0.

Run with: pytest tests/test_churn_analytics.py -v
"""

import pytest

from crm.analytics import AnalyticsConfig, ChurnAnalytics, normalize_percentages
from crm.models import CustomerCreate
from crm.storage import MemoryStorage


class TestRanking:
    def test_rank_customers_by_descending_score(self, churn):
        ranked = churn.rank_customers()
        assert [c.id for c in ranked] == [5, 7, 4, 6, 2, 1, 3]
        assert [c.churn_risk for c in ranked] == [63, 58, 27, 22, 13, 0, 0]

    def test_at_risk_customers_are_top_fifteen_percent(self, churn):
        at_risk = churn.get_customers_with_churn_risk()
        assert [c.name for c in at_risk] == ["Rahul Mehta", "Arjun Nair"]
        assert at_risk[0].churn_risk == 63

    def test_at_risk_customer_keeps_customer_fields(self, churn):
        top = churn.get_customers_with_churn_risk()[0]
        assert top.company_name == "BrightPath Retail"
        assert top.total_spent == 7800

    @pytest.mark.parametrize("total, expected", [(0, 0), (1, 1), (6, 1), (7, 2), (10, 2), (20, 3), (100, 15)])
    def test_at_risk_size(self, churn, total, expected):
        assert churn.at_risk_size(total) == expected

    def test_single_customer_is_always_at_risk(self, scorer, clock):
        storage = MemoryStorage(clock=clock)
        storage.create_customer(CustomerCreate(name="Solo", email="solo@example.com", company_name="Solo Ltd."))

        analytics = ChurnAnalytics(storage, scorer, clock=clock)

        assert len(analytics.get_customers_with_churn_risk()) == 1

    def test_no_customers(self, scorer, clock):
        analytics = ChurnAnalytics(MemoryStorage(clock=clock), scorer, clock=clock)
        assert analytics.get_customers_with_churn_risk() == []


class TestChurnMetrics:
    def test_summary_counts(self, churn):
        summary = churn.get_churn_metrics()

        assert summary.total_customers == 7
        assert summary.at_risk_count == 2
        assert summary.at_risk_percentage == "28.6%"

    def test_derived_churn_rate(self, churn):
        summary = churn.get_churn_metrics()
        assert summary.churn_rate_source == "derived"
        assert summary.current_churn_rate == "0.0%"

    def test_reported_churn_rate(self, seeded_storage, scorer, clock):
        config = AnalyticsConfig(churn_rate_mode="reported")
        analytics = ChurnAnalytics(seeded_storage, scorer, config, clock=clock)

        summary = analytics.get_churn_metrics()

        assert summary.current_churn_rate == "6.5%"
        assert summary.churn_rate_source == "reported"

    def test_derived_rate_uses_threshold(self, seeded_storage, scorer, clock):
        config = AnalyticsConfig(high_risk_threshold=50)
        analytics = ChurnAnalytics(seeded_storage, scorer, config, clock=clock)
        # Rahul and Arjun score at or above 50
        assert analytics.get_churn_metrics().current_churn_rate == "28.6%"

    def test_monthly_trend_ends_with_current_month(self, churn):
        monthly = churn.get_churn_metrics().monthly_churn

        assert [m.month for m in monthly] == ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]
        assert [m.churn_rate for m in monthly] == ["3.2%", "3.5%", "3.8%", "4.0%", "4.2%", "3.9%"]
        assert [m.new_customers for m in monthly] == [24, 28, 22, 30, 26, 32]
        assert [m.lost_customers for m in monthly] == [11, 12, 13, 14, 14, 13]

    def test_monthly_trend_wraps_year(self, churn):
        from datetime import datetime

        monthly = churn.monthly_churn(datetime(2024, 2, 10))
        assert [m.month for m in monthly] == ["Sep", "Oct", "Nov", "Dec", "Jan", "Feb"]

    def test_top_reasons_from_factors(self, churn):
        reasons = churn.get_churn_metrics().top_churn_reasons

        assert [(r.reason, r.percentage) for r in reasons] == [
            ("Unresolved critical issues", 24),
            ("Inactive for 6+ months", 25),
            ("Possible competitor engagement", 25),
            ("No orders in past 3 months", 13),
            ("No active opportunities despite high spend", 13),
        ]

    def test_top_reasons_sum_to_hundred(self, churn):
        reasons = churn.get_churn_metrics().top_churn_reasons
        assert sum(r.percentage for r in reasons) == 100

    def test_top_reasons_ignore_neutral_factors(self, churn):
        reasons = churn.top_churn_reasons([["Regular engagement patterns"], ["Regular engagement patterns"]])
        assert [r.reason for r in reasons] == [
            "Price Concerns", "Competitor Offers", "Product Features", "Customer Service", "Other",
        ]
        assert [r.percentage for r in reasons] == [35, 25, 20, 12, 8]

    def test_top_reasons_group_deal_losses(self, churn):
        reasons = churn.top_churn_reasons([["Recent deal losses (2)"], ["Recent deal losses (4)"]])
        assert reasons[0].reason == "Recent deal losses"
        assert reasons[0].percentage == 100

    def test_top_reasons_padded_with_defaults(self, churn):
        reasons = churn.top_churn_reasons([["No purchase history"], ["Inactive for 6+ months"]])

        assert len(reasons) == 5
        assert [r.reason for r in reasons[:2]] == ["No purchase history", "Inactive for 6+ months"]
        assert all(r.percentage == 0 for r in reasons[2:])
        assert sum(r.percentage for r in reasons) == 100

    def test_empty_customer_base(self, scorer, clock):
        analytics = ChurnAnalytics(MemoryStorage(clock=clock), scorer, clock=clock)

        summary = analytics.get_churn_metrics()

        assert summary.total_customers == 0
        assert summary.at_risk_count == 0
        assert summary.at_risk_percentage == "0.0%"
        assert sum(r.percentage for r in summary.top_churn_reasons) == 100


class TestNormalizePercentages:
    def test_largest_bucket_absorbs_remainder(self):
        reasons = normalize_percentages([("a", 1), ("b", 1), ("c", 1)])
        assert [r.percentage for r in reasons] == [34, 33, 33]

    def test_exact_split(self):
        reasons = normalize_percentages([("a", 3), ("b", 1)])
        assert [r.percentage for r in reasons] == [75, 25]
