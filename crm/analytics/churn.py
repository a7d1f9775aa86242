"""
Churn Analytics
===============

Runs the churn scorer over the customer base to build the at-risk list,
the dashboard churn summary and per-customer engagement summaries.
"""

import calendar
import math
from collections import Counter
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from loguru import logger

from crm.models import Customer, DealStage, EntityKind, TicketStatus
from crm.scoring import ChurnScorer, normalize_factor
from crm.storage import Storage
from crm.utils.helpers import days_between, format_percentage, safe_divide
from .config import AnalyticsConfig
from .schemas import (
    ChurnMetricsSummary,
    ChurnReason,
    ChurnRiskDetail,
    CustomerRisk,
    CustomerValue,
    EngagementActivity,
    EngagementSummary,
    MonthlyChurn,
    SupportSummary,
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_percentages(weights: Sequence[Tuple[str, float]]) -> List[ChurnReason]:
    """
    Turn weights into integer percentages summing to exactly 100.

    The rounding remainder is absorbed by the largest bucket.

    Args:
        weights: (reason, weight) pairs, weights must not all be zero

    Returns:
        List of ChurnReason in input order
    """
    total = sum(weight for _, weight in weights)
    percentages = [_round_half_up(safe_divide(weight, total) * 100) for _, weight in weights]

    if percentages:
        largest = max(range(len(percentages)), key=lambda i: weights[i][1])
        percentages[largest] += 100 - sum(percentages)

    return [ChurnReason(reason=reason, percentage=pct) for (reason, _), pct in zip(weights, percentages)]


class ChurnAnalytics:
    """Aggregate churn and engagement metrics on top of a storage backend."""

    def __init__(
        self,
        storage: Storage,
        scorer: Optional[ChurnScorer] = None,
        config: Optional[AnalyticsConfig] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize ChurnAnalytics.

        Args:
            storage: Storage backend to read from
            scorer: Churn scorer, a default one is created if omitted
            config: Aggregate cut-offs and display series
            clock: Callable returning the current time
        """
        self.storage = storage
        self.scorer = scorer or ChurnScorer()
        self.config = config or AnalyticsConfig()
        self.clock = clock or self.scorer.clock

    def _related(self, customer_id: int):
        return (
            self.storage.list_deals_by_customer(customer_id),
            self.storage.list_tickets_by_customer(customer_id),
            self.storage.list_activities_by_relation(EntityKind.CUSTOMER, customer_id),
        )

    def score_customer(self, customer: Customer, now: Optional[datetime] = None) -> int:
        """Churn score of one customer from its stored deals, tickets and activities."""
        deals, tickets, activities = self._related(customer.id)
        return self.scorer.compute_churn_score(customer, deals, tickets, activities, now=now or self.clock())

    def factors_for(self, customer: Customer, now: Optional[datetime] = None) -> List[str]:
        """Churn factors of one customer from its stored deals and tickets."""
        deals = self.storage.list_deals_by_customer(customer.id)
        tickets = self.storage.list_tickets_by_customer(customer.id)
        return self.scorer.compute_churn_factors(customer, deals, tickets, now=now or self.clock())

    def rank_customers(self, now: Optional[datetime] = None) -> List[CustomerRisk]:
        """All customers with their scores, highest risk first (ties keep storage order)."""
        now = now or self.clock()
        ranked = [
            CustomerRisk(**customer.model_dump(), churn_risk=self.score_customer(customer, now))
            for customer in self.storage.list_customers()
        ]
        ranked.sort(key=lambda c: c.churn_risk, reverse=True)
        return ranked

    def at_risk_size(self, total_customers: int) -> int:
        """Number of customers in the at-risk cut for a customer base of the given size."""
        if total_customers <= 0:
            return 0
        # Round before ceil so that e.g. 0.15 * 20 does not become 4
        return max(1, math.ceil(round(total_customers * self.config.at_risk_fraction, 9)))

    def get_customers_with_churn_risk(self, now: Optional[datetime] = None) -> List[CustomerRisk]:
        """
        Customers in the top ``at_risk_fraction`` of churn scores.

        Returns:
            At least one customer when any exist, sorted by descending score
        """
        ranked = self.rank_customers(now)
        at_risk = ranked[:self.at_risk_size(len(ranked))]
        logger.debug(f"{len(at_risk)} of {len(ranked)} customers flagged as at risk")
        return at_risk

    def current_churn_rate(self, scores: Sequence[int]) -> float:
        """
        Churn rate shown on the dashboard, in percent.

        In ``derived`` mode this is the share of customers scoring at or above
        ``high_risk_threshold``; in ``reported`` mode the configured figure.
        """
        if self.config.churn_rate_mode == "reported":
            return self.config.reported_churn_rate
        high_risk = sum(1 for s in scores if s >= self.config.high_risk_threshold)
        return safe_divide(high_risk, len(scores)) * 100

    def monthly_churn(self, now: Optional[datetime] = None) -> List[MonthlyChurn]:
        """Six-month illustrative churn trend ending with the current month."""
        now = now or self.clock()
        rates = self.config.monthly_base_rates
        new_customers = self.config.monthly_new_customers
        points = []

        for offset in range(5, -1, -1):
            month = (now.month - 1 - offset) % 12 + 1
            index = (5 - offset) % len(rates)
            rate = rates[index]
            points.append(MonthlyChurn(
                month=calendar.month_abbr[month],
                churn_rate=format_percentage(rate),
                new_customers=new_customers[(5 - offset) % len(new_customers)],
                lost_customers=_round_half_up(self.config.monthly_customer_base * rate / 100),
            ))

        return points

    def top_churn_reasons(self, factor_lists: Sequence[Sequence[str]]) -> List[ChurnReason]:
        """
        Most frequent non-neutral churn factors as percentages summing to 100.

        Args:
            factor_lists: Factors of every customer

        Returns:
            ``top_reasons_limit`` reasons, padded from the default list
        """
        limit = self.config.top_reasons_limit
        counts = Counter(
            normalize_factor(factor)
            for factors in factor_lists
            for factor in factors
            if not self.scorer.is_neutral(factor)
        )

        if not counts:
            defaults = self.config.default_churn_reasons[:limit]
            return normalize_percentages([(d.reason, d.percentage) for d in defaults])

        reasons = normalize_percentages(counts.most_common(limit))

        present = {r.reason for r in reasons}
        for default in self.config.default_churn_reasons:
            if len(reasons) >= limit:
                break
            if default.reason not in present:
                reasons.append(ChurnReason(reason=default.reason, percentage=0))

        return reasons

    def get_churn_metrics(self, now: Optional[datetime] = None) -> ChurnMetricsSummary:
        """
        Dashboard churn summary: rate, at-risk population, trend and top reasons.
        """
        now = now or self.clock()
        customers = self.storage.list_customers()
        total = len(customers)

        scores = [self.score_customer(c, now) for c in customers]
        factor_lists = [self.factors_for(c, now) for c in customers]
        at_risk_count = self.at_risk_size(total)

        summary = ChurnMetricsSummary(
            current_churn_rate=format_percentage(self.current_churn_rate(scores)),
            churn_rate_source=self.config.churn_rate_mode,
            total_customers=total,
            at_risk_count=at_risk_count,
            at_risk_percentage=format_percentage(safe_divide(at_risk_count, total) * 100),
            monthly_churn=self.monthly_churn(now),
            top_churn_reasons=self.top_churn_reasons(factor_lists),
        )
        logger.debug(f"Churn metrics computed for {total} customers")
        return summary

    def get_customer_engagement_metrics(
        self,
        customer_id: int,
        now: Optional[datetime] = None
    ) -> Optional[EngagementSummary]:
        """
        Value, activity, support and churn-risk summary for one customer.

        Args:
            customer_id: Customer identifier
            now: Reference time, defaults to the analytics clock

        Returns:
            EngagementSummary, or None if the customer does not exist
        """
        customer = self.storage.get_customer(customer_id)
        if customer is None:
            return None

        now = now or self.clock()
        deals, tickets, activities = self._related(customer_id)

        active_deals = [d for d in deals if DealStage(d.stage).is_active]
        won_deals = [d for d in deals if d.stage == DealStage.CLOSED]
        open_tickets = [t for t in tickets if TicketStatus(t.status).is_unresolved]
        deal_value = sum(d.value for d in active_deals)

        response_hours = [(t.updated_at - t.created_at).total_seconds() / 3600 for t in tickets]
        ratings = [t.satisfaction for t in tickets if t.satisfaction is not None]

        last_activity = None
        if activities:
            latest = max(a.created_at for a in activities)
            last_activity = max(0, int(days_between(latest, now)))

        return EngagementSummary(
            customer_id=customer.id,
            customer_value=CustomerValue(
                total_spent=customer.total_spent,
                deal_value=deal_value,
                lifetime_value=customer.total_spent + deal_value,
            ),
            activity=EngagementActivity(
                total_deals=len(deals),
                active_deals=len(active_deals),
                won_deals=len(won_deals),
                total_tickets=len(tickets),
                last_activity=last_activity,
                interactions=len(activities),
            ),
            support=SupportSummary(
                open_tickets=len(open_tickets),
                avg_response_time_hours=round(safe_divide(sum(response_hours), len(response_hours)), 1),
                satisfaction=round(safe_divide(sum(ratings), len(ratings)), 1),
            ),
            churn_risk=ChurnRiskDetail(
                score=self.scorer.compute_churn_score(customer, deals, tickets, activities, now=now),
                last_order=customer.last_order_date,
                factors=self.scorer.compute_churn_factors(customer, deals, tickets, now=now),
            ),
        )
