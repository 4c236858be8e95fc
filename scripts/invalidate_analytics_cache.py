from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def load_env_file(env_path: str) -> None:
    if not os.path.exists(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as env_file:
        for line in env_file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key, value)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Drop cached sales analytics snapshots after new sales data has been ingested."
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Actually delete keys. Without this flag, script only reports matching keys.",
    )
    parser.add_argument(
        "--env-file",
        default=os.path.join(PROJECT_ROOT, ".env"),
        help="Path to .env file.",
    )
    return parser.parse_args()


def run_invalidation(apply: bool) -> Dict[str, Any]:
    from src.core.cache import AnalyticsCache
    from src.core.config import get_settings
    from src.services.sales_analytics_service import SALES_ANALYTICS_KEY_PREFIX

    cache = AnalyticsCache.from_settings(get_settings())
    pattern = AnalyticsCache.namespaced(f"{SALES_ANALYTICS_KEY_PREFIX}*")
    try:
        if not apply:
            matching = sum(1 for _ in cache.client.scan_iter(match=pattern))
            return {"mode": "dry_run", "pattern": pattern, "matching_keys": matching}
        removed = cache.delete_matching(f"{SALES_ANALYTICS_KEY_PREFIX}*")
        return {"mode": "apply", "pattern": pattern, "keys_removed": removed}
    finally:
        cache.close()


def main() -> None:
    args = parse_args()
    load_env_file(os.path.abspath(args.env_file))
    result = run_invalidation(apply=args.apply)
    print(json.dumps(result, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
