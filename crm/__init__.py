"""
CRM Analytics
=============

Customer-relationship-management backend with churn-risk scoring
and dashboard analytics.

Modules:
    - models: Entity models and typed entity references
    - storage: Storage contract with in-memory and SQL backends
    - scoring: Heuristic churn-risk scoring
    - analytics: Churn, engagement, sales and product analytics
    - api: FastAPI backend
    - dashboard: Streamlit frontend
    - utils: Utility functions
"""

__version__ = "1.0.0"
