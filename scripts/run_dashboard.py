"""
Run Streamlit Dashboard
=======================

Starts the CRM dashboard (revenue, churn risk, customer engagement and
sales pipeline pages). The dashboard reads everything from the CRM API.

Usage:
    python scripts/run_dashboard.py
    python scripts/run_dashboard.py --api-url http://crm-api:8000
"""

import argparse
import os
import subprocess
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import httpx

from config import get_config


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Serve the CRM analytics dashboard")

    parser.add_argument("--port", type=int, default=8501, help="Port the dashboard listens on")
    parser.add_argument("--browser", action="store_true", help="Open a browser tab on start")
    parser.add_argument("--api-url", type=str,
                        help="CRM API base URL, overrides dashboard.api_url")

    return parser.parse_args()


def main():
    """Check the API and start streamlit."""
    args = parse_args()
    if args.api_url:
        os.environ["CRM_API_URL"] = args.api_url
    api_url = get_config().get("dashboard", {}).get("api_url", "http://localhost:8000")

    try:
        health = httpx.get(f"{api_url}/health", timeout=3).json()
        print(f"CRM API at {api_url}: {health['customers']} customers ({health['storage_backend']})")
    except (httpx.HTTPError, ValueError, KeyError):
        print(f"CRM API not reachable at {api_url}; start it with: python scripts/run_api.py")

    print(f"CRM dashboard on http://localhost:{args.port}")

    cmd = [
        sys.executable, "-m", "streamlit", "run",
        str(project_root / "crm" / "dashboard" / "app.py"),
        "--server.port", str(args.port),
        "--server.headless", str(not args.browser).lower(),
    ]

    subprocess.run(cmd, env=os.environ.copy())


if __name__ == "__main__":
    main()
