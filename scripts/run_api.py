"""
Run FastAPI Server
==================

Starts the CRM API: customer, deal, ticket and activity records plus the
churn-risk and sales analytics endpoints.

Usage:
    python scripts/run_api.py
    python scripts/run_api.py --storage sql --database-url sqlite:///data/crm.db
"""

import argparse
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn

from config import get_config


def parse_args(api_config: dict):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Serve CRM records with churn-risk and sales analytics"
    )

    parser.add_argument("--host", type=str, default=api_config.get("host", "0.0.0.0"),
                        help="Interface the API binds to")
    parser.add_argument("--port", type=int, default=api_config.get("port", 8000),
                        help="Port the API listens on")
    parser.add_argument("--reload", action="store_true",
                        help="Reload on source changes (single worker)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Worker processes; use --storage sql for more than one")
    parser.add_argument("--storage", choices=["memory", "sql"],
                        help="Storage backend, overrides storage.backend")
    parser.add_argument("--database-url", type=str,
                        help="SQLAlchemy URL for the sql backend, overrides database.url")

    return parser.parse_args()


def main():
    """Export overrides for the app process and start uvicorn."""
    args = parse_args(get_config().get("api", {}))

    # The app reads its config on import, in the uvicorn process
    if args.storage:
        os.environ["CRM_STORAGE_BACKEND"] = args.storage
    if args.database_url:
        os.environ["DATABASE_URL"] = args.database_url

    config = get_config()
    backend = config.get("storage", {}).get("backend", "memory")
    workers = 1 if args.reload else args.workers

    if backend == "memory" and workers > 1:
        print("Memory storage is per process; each worker will hold its own records.")

    base = f"http://localhost:{args.port}"
    print(f"CRM API on {args.host}:{args.port} (storage: {backend}, workers: {workers})")
    if backend == "sql":
        print(f"  database:     {config.get('database', {}).get('url') or 'data/crm.db'}")
    print(f"  docs:         {base}/docs")
    print(f"  churn risk:   {base}/api/analytics/customers/churn-risk")
    print(f"  churn report: {base}/api/analytics/dashboard/churn-metrics")

    uvicorn.run(
        "crm.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=workers,
    )


if __name__ == "__main__":
    main()
