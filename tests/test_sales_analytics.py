"""
Sales, team and product analytics tests over the sample data set.

Run with: pytest tests/test_sales_analytics.py -v
"""

import pytest

from crm.analytics import SalesAnalytics
from crm.analytics.products import stock_status
from crm.storage import MemoryStorage


class TestDealQueries:
    def test_deals_by_stage(self, sales):
        assert [d.id for d in sales.get_deals_by_stage("lost")] == [5, 6, 7]

    def test_deals_by_stage_ignores_case(self, sales):
        assert len(sales.get_deals_by_stage(" LOST ")) == 3

    def test_unknown_stage(self, sales):
        assert sales.get_deals_by_stage("won") == []

    def test_deals_by_assignee(self, sales):
        assert [d.id for d in sales.get_deals_by_assignee("priya sharma")] == [1, 3]
        assert [d.id for d in sales.get_deals_by_assignee("Anita Rao")] == [5, 6, 8]


class TestPipeline:
    def test_every_stage_in_pipeline_order(self, sales):
        summary = sales.get_pipeline_summary()
        assert [s.stage for s in summary.stages] == ["lead", "qualified", "proposal", "negotiation", "closed", "lost"]

    def test_stage_totals(self, sales):
        stages = {s.stage: s for s in sales.get_pipeline_summary().stages}

        assert stages["lead"].deal_count == 1
        assert stages["lead"].total_value == 1275000
        assert stages["lost"].deal_count == 3
        assert stages["lost"].total_value == 710000
        assert stages["proposal"].weighted_value == 637500

    def test_pipeline_value_counts_active_deals_only(self, sales):
        summary = sales.get_pipeline_summary()

        assert summary.total_deals == 8
        assert summary.pipeline_value == 3060000
        assert summary.weighted_pipeline_value == 1456750

    def test_empty_pipeline(self, clock):
        summary = SalesAnalytics(MemoryStorage(clock=clock)).get_pipeline_summary()

        assert summary.total_deals == 0
        assert summary.pipeline_value == 0
        assert all(s.deal_count == 0 for s in summary.stages)


class TestSalesPerformance:
    def test_won_lost_open_values(self, sales):
        performance = sales.get_sales_performance()

        assert performance.total_deal_value == 4410000
        assert performance.won_value == 640000
        assert performance.lost_value == 710000
        assert performance.open_value == 3060000

    def test_win_rate(self, sales):
        performance = sales.get_sales_performance()

        assert performance.won_deals == 1
        assert performance.lost_deals == 3
        assert performance.win_rate == 25.0

    def test_average_deal_size(self, sales):
        assert sales.get_sales_performance().average_deal_size == 551250

    def test_monthly_revenue(self, sales):
        monthly = sales.get_sales_performance().monthly_revenue

        assert len(monthly) == 8
        assert monthly[0].month == "Jan"
        assert monthly[6].change == -8.8

    def test_no_deals(self, clock):
        performance = SalesAnalytics(MemoryStorage(clock=clock)).get_sales_performance()

        assert performance.win_rate == 0
        assert performance.average_deal_size == 0


class TestTeamAnalytics:
    def test_totals(self, sales):
        team = sales.get_team_analytics()

        assert team.total_members == 4
        assert team.total_deals_won == 36
        assert team.total_tickets_resolved == 170

    def test_departments(self, sales):
        departments = {d.department: d for d in sales.get_team_analytics().departments}

        assert set(departments) == {"Customer Success", "Sales", "Support"}
        assert departments["Sales"].members == 2
        assert departments["Sales"].deals_won == 30
        assert departments["Support"].tickets_resolved == 128

    def test_top_performers(self, sales):
        top = sales.get_team_analytics(top_n=2).top_performers
        assert [m.name for m in top] == ["Vikram Singh", "Priya Sharma"]

    def test_empty_team(self, clock):
        team = SalesAnalytics(MemoryStorage(clock=clock)).get_team_analytics()
        assert team.total_members == 0
        assert team.departments == []


class TestRecentCustomers:
    def test_most_recent_orders_first(self, sales):
        recent = sales.get_recent_customers(limit=4)
        assert [c.name for c in recent] == ["David Rodriguez", "Michael Johnson", "Sarah Williams", "Emily Chen"]

    def test_customers_without_orders_last(self, sales):
        assert sales.get_recent_customers(limit=10)[-1].name == "Arjun Nair"


class TestProducts:
    def test_inventory_lowest_stock_first(self, products):
        inventory = products.get_product_inventory()

        assert [i.name for i in inventory[:2]] == ["API Integration Package", "Cloud Storage 5TB"]
        assert [i.stock_status for i in inventory] == ["out_of_stock", "low_stock", "in_stock", "in_stock"]

    def test_product_performance(self, products):
        performance = products.get_product_performance(1)

        assert performance.product.name == "Enterprise CRM Suite"
        assert performance.revenue == 55100000
        assert performance.profit == 16530000
        assert performance.stock_status == "in_stock"

    def test_unknown_product(self, products):
        assert products.get_product_performance(99) is None

    def test_top_products_by_price(self, products):
        top = products.get_top_products(limit=2)
        assert [p.name for p in top] == ["Enterprise CRM Suite", "Premium Support Plan"]

    @pytest.mark.parametrize("available, threshold, expected", [
        (0, 5, "out_of_stock"),
        (5, 5, "low_stock"),
        (6, 5, "in_stock"),
    ])
    def test_stock_status(self, products, available, threshold, expected):
        product = products.storage.get_product(1).model_copy(
            update={"stock_available": available, "stock_threshold": threshold}
        )
        assert stock_status(product) == expected
