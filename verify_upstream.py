"""
Checks the configured cats API directly against the descriptor's return schemas.
Usage: python verify_upstream.py [n]
"""

import sys
from typing import Any, Dict, List

import requests
from dotenv import load_dotenv

from cats_gateway.config import ConfigurationError, GatewayConfig

load_dotenv()


def missing_fields(record: Any, required: List[str]) -> List[str]:
    if not isinstance(record, dict):
        return list(required)
    return [field for field in required if field not in record]


def check_random_cat(config: GatewayConfig) -> bool:
    url = f"{config.base_url}{config.endpoint_path('get_random_cat')}"
    print(f"Calling endpoint: {url}")
    try:
        resp = requests.get(url)
        resp.raise_for_status()
        cat = resp.json()
    except (requests.RequestException, ValueError) as e:
        print(f"Error testing get_random_cat: {e}")
        return False

    required = config.tools["get_random_cat"].returns.get("required", [])
    missing = missing_fields(cat, required)
    if missing:
        print(f"Response missing required fields: {', '.join(missing)}")
        return False
    print(f"Random cat OK: {cat.get('name')}")
    return True


def check_cats(config: GatewayConfig, n: int) -> bool:
    url = f"{config.base_url}{config.endpoint_path('get_cats')}"
    print(f"Calling endpoint: {url}?n={n}")
    try:
        resp = requests.get(url, params={"n": n})
        resp.raise_for_status()
        cats = resp.json()
    except (requests.RequestException, ValueError) as e:
        print(f"Error testing get_cats: {e}")
        return False

    if not isinstance(cats, list):
        print("Response is not an array as expected")
        return False
    if len(cats) != n:
        print(f"Expected {n} cats, but got {len(cats)}")
        return False

    items: Dict[str, Any] = config.tools["get_cats"].returns.get("items", {})
    required = items.get("required") or list(items.get("properties", {}))
    for i, cat in enumerate(cats):
        missing = missing_fields(cat, required)
        if missing:
            print(f"Cat at index {i} missing fields: {', '.join(missing)}")
            return False
    print(f"{len(cats)} cats OK")
    return True


def main() -> None:
    n = int(sys.argv[1]) if len(sys.argv) > 1 else 3
    try:
        config = GatewayConfig()
    except ConfigurationError as e:
        print(f"CRITICAL: {e}")
        sys.exit(2)

    print(f"Validating {config.server_name} v{config.server_version} against {config.base_url}")
    ok = check_random_cat(config)
    ok = check_cats(config, n) and ok

    if not ok:
        print("FAILED: Upstream validation failed.")
        sys.exit(1)
    print("SUCCESS: Upstream validation passed.")


if __name__ == "__main__":
    main()
