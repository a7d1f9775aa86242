"""Settings for dashboard-level churn aggregates."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class DefaultChurnReason(BaseModel):
    reason: str
    percentage: float = Field(..., gt=0)


DEFAULT_CHURN_REASONS = [
    DefaultChurnReason(reason="Price Concerns", percentage=35),
    DefaultChurnReason(reason="Competitor Offers", percentage=25),
    DefaultChurnReason(reason="Product Features", percentage=20),
    DefaultChurnReason(reason="Customer Service", percentage=12),
    DefaultChurnReason(reason="Other", percentage=8),
]


class AnalyticsConfig(BaseModel):
    """Cut-offs and display series used by the churn metrics summary."""

    at_risk_fraction: float = Field(0.15, gt=0, le=1, description="Share of customers flagged as at risk")
    high_risk_threshold: int = Field(70, ge=0, le=100, description="Score from which a customer counts as churning")
    churn_rate_mode: Literal["derived", "reported"] = "derived"
    reported_churn_rate: float = Field(6.5, ge=0, le=100)
    top_reasons_limit: int = Field(5, ge=1)
    monthly_base_rates: List[float] = Field(default_factory=lambda: [3.2, 3.5, 3.8, 4.0, 4.2, 3.9], min_length=1)
    monthly_new_customers: List[int] = Field(default_factory=lambda: [24, 28, 22, 30, 26, 32], min_length=1)
    monthly_customer_base: int = Field(345, ge=0, description="Customer base behind the illustrative monthly series")
    default_churn_reasons: List[DefaultChurnReason] = Field(
        default_factory=lambda: [r.model_copy() for r in DEFAULT_CHURN_REASONS],
        min_length=1
    )

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> "AnalyticsConfig":
        """Build from the ``analytics`` section of the application config."""
        section = (config or {}).get("analytics") or {}
        return cls(**{k: v for k, v in section.items() if v is not None})
