"""Weights and thresholds for the churn-risk heuristic."""

from typing import List, Optional

from pydantic import BaseModel, Field


DEFAULT_NEUTRAL_FACTORS = [
    "Regular engagement patterns",
    "Healthy customer relationship",
    "Normal usage behavior",
    "Stable account health",
]


class ChurnScoringConfig(BaseModel):
    """All tunable constants of the churn score and the churn factors."""

    seed: Optional[int] = Field(None, description="Seed for the jitter/neutral-factor random source")
    deterministic: bool = Field(False, description="Drop jitter and pick the first neutral factor")
    baseline: float = 15.0
    jitter: float = Field(3.0, ge=0)

    # Order recency
    no_order_penalty: float = 18.0
    recent_order_days: float = 30
    recent_order_bonus: float = 10.0
    moderate_order_days: float = 90
    moderate_order_bonus: float = 5.0
    stale_order_days: float = 180
    stale_order_divisor: float = Field(10.0, gt=0)
    stale_order_cap: float = 25.0

    # Spend tiers
    high_spend_threshold: float = 50000
    high_spend_bonus: float = 8.0
    low_spend_threshold: float = 10000
    low_spend_penalty: float = 5.0

    # Support load
    many_open_tickets: int = 2
    many_open_tickets_penalty: float = 15.0
    some_open_tickets_penalty: float = 8.0
    high_priority_ticket_penalty: float = 7.0

    # Deal engagement
    active_deal_bonus: float = 4.0
    active_deal_cap: float = 12.0

    # Activity
    no_activity_penalty: float = 20.0
    activity_count_cap: int = 8
    recent_activity_days: float = 7
    recent_activity_bonus: float = 10.0
    stale_activity_days: float = 60
    stale_activity_divisor: float = Field(15.0, gt=0)
    stale_activity_cap: float = 12.0

    # Factor thresholds
    factor_inactive_days: float = 180
    factor_no_recent_order_days: float = 90
    factor_competitor_days: float = 60
    factor_high_spend_threshold: float = 20000
    factor_many_tickets: int = 3
    neutral_factors: List[str] = Field(default_factory=lambda: list(DEFAULT_NEUTRAL_FACTORS), min_length=1)

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> "ChurnScoringConfig":
        """Build from the ``scoring`` section of the application config."""
        section = (config or {}).get("scoring") or {}
        return cls(**{k: v for k, v in section.items() if v is not None})
