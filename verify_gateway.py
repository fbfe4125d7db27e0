"""
Black-box checks against a running HTTP gateway.
Usage: python verify_gateway.py [url]   (default http://localhost:3000)
"""

import sys
import time
from typing import Any, Callable, Dict, List, Optional

import requests

CAT_FIELDS = ["uuid", "name", "description", "image", "date_created"]


def rpc(url: str, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"jsonrpc": "2.0", "method": method, "params": params or {}, "id": int(time.time() * 1000)}
    resp = requests.post(url, json=payload, timeout=10)
    resp.raise_for_status()
    return dict(resp.json())


def check_tools_list(url: str) -> None:
    tools = rpc(url, "tools/list")["result"]["tools"]
    names = [t["name"] for t in tools]
    assert "get_random_cat" in names and "get_cats" in names, f"Missing expected tools: {names}"


def check_random_cat(url: str) -> None:
    data = rpc(url, "get_random_cat")
    assert "error" not in data, f"get_random_cat returned error: {data.get('error')}"
    missing = [f for f in CAT_FIELDS if f not in data["result"]]
    assert not missing, f"Response missing required fields: {missing}"


def check_cats(url: str) -> None:
    data = rpc(url, "get_cats", {"n": 3})
    assert "error" not in data, f"get_cats returned error: {data.get('error')}"
    assert len(data["result"]) == 3, f"Expected 3 cats, got {len(data['result'])}"


def check_invalid_params(url: str) -> None:
    data = rpc(url, "get_cats", {"n": -1})
    assert data.get("error", {}).get("code") == -32602, f"Expected -32602, got {data}"


def check_unknown_method(url: str) -> None:
    data = rpc(url, "no_such_method")
    assert data.get("error", {}).get("code") == -32601, f"Expected -32601, got {data}"


def check_health(url: str) -> None:
    resp = requests.get(f"{url.rstrip('/')}/health", timeout=5)
    assert resp.status_code == 200 and resp.text == "OK", f"Health returned {resp.status_code}"


CHECKS: List[Callable[[str], None]] = [
    check_health,
    check_tools_list,
    check_random_cat,
    check_cats,
    check_invalid_params,
    check_unknown_method,
]


def main() -> None:
    url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:3000"
    print(f"Verifying gateway at {url}...")

    failed = 0
    for check in CHECKS:
        try:
            check(url)
            print(f"PASS {check.__name__}")
        except (AssertionError, requests.RequestException, KeyError) as e:
            failed += 1
            print(f"FAIL {check.__name__}: {e}")

    if failed:
        print(f"FAILED: {failed}/{len(CHECKS)} checks failed.")
        sys.exit(1)
    print("SUCCESS: Gateway verification passed.")


if __name__ == "__main__":
    main()
