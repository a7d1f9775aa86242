"""
Churn Scoring
=============

Heuristic churn-risk score and the human-readable factors behind it.

The score starts from a baseline and is adjusted by five signals: order
recency, spend tier, support load, deal engagement and activity recency.
A small jitter keeps similar customers from landing on identical scores;
it comes from an injected random source so runs can be reproduced.
"""

import math
import random
import re
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from loguru import logger

from crm.models import (
    ActivityLog,
    Customer,
    CustomerStatus,
    Deal,
    DealStage,
    Ticket,
    TicketPriority,
    TicketStatus,
)
from crm.utils.helpers import days_between
from .config import ChurnScoringConfig


_COUNT_SUFFIX = re.compile(r"\s*\(\d+\)$")


def normalize_factor(factor: str) -> str:
    """Strip the trailing count from factors such as ``"Recent deal losses (3)"``."""
    return _COUNT_SUFFIX.sub("", factor)


class ChurnScorer:
    """Compute churn-risk scores and churn factors for single customers."""

    def __init__(
        self,
        config: Optional[ChurnScoringConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize ChurnScorer.

        Args:
            config: Scoring weights and thresholds
            rng: Random source for jitter and neutral factors
            clock: Callable returning the current time
        """
        self.config = config or ChurnScoringConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.clock = clock or datetime.now

    def is_neutral(self, factor: str) -> bool:
        """Whether a factor is one of the filler phrases used when nothing fired."""
        return factor in self.config.neutral_factors

    def compute_churn_score(
        self,
        customer: Customer,
        deals: Sequence[Deal],
        tickets: Sequence[Ticket],
        activities: Sequence[ActivityLog],
        now: Optional[datetime] = None
    ) -> int:
        """
        Compute a churn-risk score between 0 and 100.

        Args:
            customer: Customer to score
            deals: Deals of the customer
            tickets: Support tickets of the customer
            activities: Activity logs related to the customer
            now: Reference time, defaults to the scorer clock

        Returns:
            Integer score, higher means more likely to churn
        """
        cfg = self.config
        now = now or self.clock()
        score = cfg.baseline

        # Order recency
        if customer.last_order_date is None:
            score += cfg.no_order_penalty
        else:
            days = days_between(customer.last_order_date, now)
            if days < cfg.recent_order_days:
                score -= cfg.recent_order_bonus
            elif days <= cfg.moderate_order_days:
                score -= cfg.moderate_order_bonus
            elif days > cfg.stale_order_days:
                score += min((days - cfg.stale_order_days) / cfg.stale_order_divisor, cfg.stale_order_cap)

        # Spend tier
        if customer.total_spent > cfg.high_spend_threshold:
            score -= cfg.high_spend_bonus
        elif customer.total_spent < cfg.low_spend_threshold:
            score += cfg.low_spend_penalty

        # Support load
        open_tickets = sum(1 for t in tickets if TicketStatus(t.status).is_unresolved)
        if open_tickets > cfg.many_open_tickets:
            score += cfg.many_open_tickets_penalty
        elif open_tickets > 0:
            score += cfg.some_open_tickets_penalty

        high_priority = sum(
            1 for t in tickets
            if t.priority == TicketPriority.HIGH and t.status != TicketStatus.CLOSED
        )
        score += high_priority * cfg.high_priority_ticket_penalty

        # Deal engagement
        active_deals = sum(1 for d in deals if DealStage(d.stage).is_active)
        score -= min(active_deals * cfg.active_deal_bonus, cfg.active_deal_cap)

        # Activity recency and volume
        if not activities:
            score += cfg.no_activity_penalty
        else:
            score -= min(len(activities), cfg.activity_count_cap)
            latest = max(a.created_at for a in activities)
            days = days_between(latest, now)
            if days < cfg.recent_activity_days:
                score -= cfg.recent_activity_bonus
            elif days > cfg.stale_activity_days:
                score += min(days / cfg.stale_activity_divisor, cfg.stale_activity_cap)

        if not cfg.deterministic and cfg.jitter:
            score += self.rng.uniform(-cfg.jitter, cfg.jitter)

        score = max(0.0, min(100.0, score))
        return int(math.floor(score + 0.5))

    def compute_churn_factors(
        self,
        customer: Customer,
        deals: Sequence[Deal],
        tickets: Sequence[Ticket],
        now: Optional[datetime] = None
    ) -> List[str]:
        """
        Explain a customer's churn risk.

        Factors are listed in evaluation order, not by severity. When no
        negative signal fires a single neutral phrase is returned.

        Args:
            customer: Customer to explain
            deals: Deals of the customer
            tickets: Support tickets of the customer
            now: Reference time, defaults to the scorer clock

        Returns:
            Non-empty list of factor strings
        """
        cfg = self.config
        now = now or self.clock()
        factors = []

        days_since_order = None
        if customer.last_order_date is None:
            factors.append("No purchase history")
        else:
            days_since_order = days_between(customer.last_order_date, now)
            if days_since_order > cfg.factor_inactive_days:
                factors.append("Inactive for 6+ months")
            elif days_since_order > cfg.factor_no_recent_order_days:
                factors.append("No orders in past 3 months")

        unresolved = [t for t in tickets if TicketStatus(t.status).is_unresolved]
        if any(t.priority == TicketPriority.HIGH for t in unresolved):
            factors.append("Unresolved critical issues")
        elif len(unresolved) > 1:
            factors.append("Multiple unresolved support requests")

        lost_deals = sum(1 for d in deals if d.stage == DealStage.LOST)
        if lost_deals > 1:
            factors.append(f"Recent deal losses ({lost_deals})")

        active_deals = sum(1 for d in deals if DealStage(d.stage).is_active)
        if active_deals == 0 and customer.total_spent > cfg.factor_high_spend_threshold:
            factors.append("No active opportunities despite high spend")

        if customer.total_spent < cfg.low_spend_threshold and customer.status == CustomerStatus.INACTIVE:
            factors.append("Low value & inactive account")

        if len(tickets) > cfg.factor_many_tickets and unresolved:
            factors.append("Multiple support interactions")

        if lost_deals > 0 and days_since_order is not None and days_since_order > cfg.factor_competitor_days:
            factors.append("Possible competitor engagement")

        if not factors:
            if cfg.deterministic:
                factors.append(cfg.neutral_factors[0])
            else:
                factors.append(self.rng.choice(cfg.neutral_factors))
            logger.debug(f"No churn signal for customer {customer.id}, using neutral factor")

        return factors
