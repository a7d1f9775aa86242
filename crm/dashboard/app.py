"""
Streamlit Dashboard Application
===============================

Interactive dashboard for CRM churn risk, customer engagement and sales.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from typing import Dict, List, Optional

import httpx
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st
from streamlit_option_menu import option_menu

from config import get_config

# Page config
st.set_page_config(
    page_title="CRM Analytics Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #1f77b4;
        text-align: center;
        padding: 1rem;
    }
    .stMetric {
        background-color: #f0f2f6;
        padding: 10px;
        border-radius: 5px;
    }
</style>
""", unsafe_allow_html=True)

# API Configuration
API_URL = get_config().get("dashboard", {}).get("api_url", "http://localhost:8000")


def get_api_health():
    """Check API health status."""
    try:
        response = httpx.get(f"{API_URL}/health", timeout=5)
        return response.json() if response.status_code == 200 else None
    except Exception:
        return None


def api_get(path: str, params: Optional[Dict] = None):
    """GET a JSON resource from the API, or None if unavailable."""
    try:
        response = httpx.get(f"{API_URL}{path}", params=params, timeout=10)
        return response.json() if response.status_code == 200 else None
    except Exception as e:
        st.error(f"API Error: {e}")
        return None


def get_churn_metrics() -> Optional[Dict]:
    """Get dashboard churn summary from API."""
    return api_get("/api/analytics/dashboard/churn-metrics")


def get_at_risk_customers() -> Optional[List]:
    """Get at-risk customers from API."""
    return api_get("/api/analytics/customers/churn-risk")


def get_engagement(customer_id: int) -> Optional[Dict]:
    """Get engagement metrics of one customer from API."""
    return api_get(f"/api/analytics/customers/{customer_id}/engagement")


def get_export(time_range: str) -> Optional[str]:
    """Get the dashboard CSV export from API."""
    try:
        response = httpx.get(
            f"{API_URL}/api/dashboard/export",
            params={"time_range": time_range},
            timeout=10
        )
        return response.text if response.status_code == 200 else None
    except Exception:
        return None


def risk_gauge(score: int) -> go.Figure:
    """Gauge chart of a churn score."""
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=score,
        domain={'x': [0, 1], 'y': [0, 1]},
        gauge={
            'axis': {'range': [0, 100]},
            'bar': {'color': "darkblue"},
            'steps': [
                {'range': [0, 40], 'color': "lightgreen"},
                {'range': [40, 70], 'color': "yellow"},
                {'range': [70, 100], 'color': "red"}
            ],
            'threshold': {
                'line': {'color': "red", 'width': 4},
                'thickness': 0.75,
                'value': 70
            }
        }
    ))
    fig.update_layout(height=250)
    return fig


# Sidebar Navigation
with st.sidebar:
    st.markdown("## CRM Analytics")

    selected = option_menu(
        menu_title=None,
        options=["Dashboard", "Churn Risk", "Customer Engagement", "Sales Pipeline"],
        icons=["speedometer2", "exclamation-triangle", "person", "funnel"],
        menu_icon="cast",
        default_index=0,
    )

    st.markdown("---")

    # API Status
    health = get_api_health()
    if health:
        st.success("API Connected")
        st.info(f"{health.get('customers', 0)} customers ({health.get('storage_backend')})")
    else:
        st.error("API Disconnected")
        st.info("Start API with:\n`uvicorn crm.api.main:app --reload`")


# Dashboard Page
if selected == "Dashboard":
    st.markdown('<h1 class="main-header">CRM Dashboard</h1>', unsafe_allow_html=True)

    metrics = get_churn_metrics()
    performance = api_get("/api/analytics/dashboard/sales-performance")

    col1, col2, col3, col4 = st.columns(4)
    if metrics and performance:
        with col1:
            st.metric(label="Total Customers", value=metrics["total_customers"])
        with col2:
            st.metric(label="Churn Rate", value=metrics["current_churn_rate"])
        with col3:
            st.metric(label="At-Risk Customers", value=metrics["at_risk_count"])
        with col4:
            st.metric(label="Win Rate", value=f"{performance['win_rate']:.1f}%")
    else:
        for col in [col1, col2, col3, col4]:
            with col:
                st.metric(label="--", value="N/A")

    st.markdown("---")

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Monthly Revenue")
        revenue = api_get("/api/dashboard/revenue-metrics")
        if revenue:
            df = pd.DataFrame(revenue)
            df["period"] = df["month"] + " " + df["year"].astype(str)
            fig = px.line(df, x="period", y="value", markers=True)
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No revenue data available.")

    with col2:
        st.subheader("Sales by Category")
        categories = api_get("/api/dashboard/category-sales")
        if categories:
            fig = px.pie(pd.DataFrame(categories), names="category", values="percentage")
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No category data available.")

    st.markdown("---")
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Top Products")
        products = api_get("/api/dashboard/top-products", {"limit": 4})
        if products:
            st.dataframe(pd.DataFrame(products)[["name", "category", "price", "sales_count"]], use_container_width=True)

    with col2:
        st.subheader("Recent Customers")
        customers = api_get("/api/dashboard/recent-customers", {"limit": 4})
        if customers:
            st.dataframe(pd.DataFrame(customers)[["name", "company_name", "total_spent", "last_order_date"]],
                         use_container_width=True)

    # Export option
    st.markdown("---")
    time_range = st.selectbox("Report window", ["last7days", "last30days", "last90days"], index=1)
    csv = get_export(time_range)
    if csv:
        st.download_button(
            label="Download CSV",
            data=csv,
            file_name=f"dashboard-report-{time_range}.csv",
            mime="text/csv"
        )


# Churn Risk Page
elif selected == "Churn Risk":
    st.markdown('<h1 class="main-header">Churn Risk</h1>', unsafe_allow_html=True)

    metrics = get_churn_metrics()

    if metrics:
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric(label="Churn Rate", value=metrics["current_churn_rate"],
                      help=f"Source: {metrics['churn_rate_source']}")
        with col2:
            st.metric(label="At-Risk Customers", value=metrics["at_risk_count"])
        with col3:
            st.metric(label="At-Risk Share", value=metrics["at_risk_percentage"])

        col1, col2 = st.columns(2)

        with col1:
            st.subheader("Monthly Churn")
            trend = pd.DataFrame(metrics["monthly_churn"])
            trend["churn_rate"] = trend["churn_rate"].str.rstrip("%").astype(float)
            fig = go.Figure()
            fig.add_trace(go.Bar(x=trend["month"], y=trend["new_customers"], name="New", marker_color="#00cc00"))
            fig.add_trace(go.Bar(x=trend["month"], y=trend["lost_customers"], name="Lost", marker_color="#ff4b4b"))
            fig.add_trace(go.Scatter(x=trend["month"], y=trend["churn_rate"], name="Churn Rate (%)", yaxis="y2"))
            fig.update_layout(barmode="group", yaxis2=dict(overlaying="y", side="right"))
            st.plotly_chart(fig, use_container_width=True)

        with col2:
            st.subheader("Top Churn Reasons")
            reasons = pd.DataFrame(metrics["top_churn_reasons"])
            fig = px.bar(reasons, x="percentage", y="reason", orientation="h")
            st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No churn metrics available.")

    st.markdown("---")
    st.subheader("At-Risk Customers")

    at_risk = get_at_risk_customers()
    if at_risk:
        df = pd.DataFrame(at_risk)
        display_cols = ["id", "name", "company_name", "status", "total_spent", "last_order_date", "churn_risk"]
        available_cols = [c for c in display_cols if c in df.columns]
        st.dataframe(df[available_cols], use_container_width=True)
    else:
        st.info("No customers flagged as at risk.")


# Customer Engagement Page
elif selected == "Customer Engagement":
    st.markdown('<h1 class="main-header">Customer Engagement</h1>', unsafe_allow_html=True)

    customers = api_get("/api/customers") or []
    options = {f"{c['name']} ({c['company_name'] or 'n/a'})": c["id"] for c in customers}

    if options:
        choice = st.selectbox("Customer", list(options.keys()))
        engagement = get_engagement(options[choice])

        if engagement:
            value = engagement["customer_value"]
            activity = engagement["activity"]
            support = engagement["support"]
            risk = engagement["churn_risk"]

            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric(label="Lifetime Value", value=f"${value['lifetime_value']:,.2f}")
                st.metric(label="Active Deals", value=activity["active_deals"])
                st.metric(label="Interactions", value=activity["interactions"])
            with col2:
                st.metric(label="Open Tickets", value=support["open_tickets"])
                st.metric(label="Avg Response (h)", value=support["avg_response_time_hours"])
                st.metric(label="Satisfaction", value=support["satisfaction"])
            with col3:
                st.plotly_chart(risk_gauge(risk["score"]), use_container_width=True)

            st.subheader("Churn Factors")
            for factor in risk["factors"]:
                st.markdown(f"- {factor}")
        else:
            st.error("Failed to load engagement metrics.")
    else:
        st.info("No customers available.")


# Sales Pipeline Page
elif selected == "Sales Pipeline":
    st.markdown('<h1 class="main-header">Sales Pipeline</h1>', unsafe_allow_html=True)

    pipeline = api_get("/api/analytics/deals/pipeline")
    team = api_get("/api/analytics/dashboard/team-analytics")

    if pipeline:
        col1, col2 = st.columns(2)
        with col1:
            st.metric(label="Pipeline Value", value=f"${pipeline['pipeline_value']:,.2f}")
        with col2:
            st.metric(label="Weighted Pipeline", value=f"${pipeline['weighted_pipeline_value']:,.2f}")

        stages = pd.DataFrame(pipeline["stages"])
        fig = px.funnel(stages, x="total_value", y="stage")
        st.plotly_chart(fig, use_container_width=True)

    if team:
        st.markdown("---")
        st.subheader("Team Performance")
        departments = pd.DataFrame(team["departments"])
        if not departments.empty:
            fig = px.bar(departments, x="department", y=["deals_won", "tickets_resolved"], barmode="group")
            st.plotly_chart(fig, use_container_width=True)
        st.dataframe(pd.DataFrame(team["top_performers"]), use_container_width=True)


# Run with: streamlit run crm/dashboard/app.py
