#!/usr/bin/env python3
"""Smoke test for the Shiori lookup API endpoints.

Run the server first:
  cd src && python main.py

Then run this test:
  python scripts/smoke_api.py
"""

import json

import httpx

BASE_URL = "http://localhost:8000"


def test_endpoint(name: str, method: str, path: str, data: dict | None = None):
    """Call an API endpoint and print the response."""
    print(f"\n{'='*60}")
    print(f"TEST: {name}")
    print(f"{'='*60}")

    url = f"{BASE_URL}{path}"
    print(f"{method} {path}")
    if data:
        print(f"Request: {json.dumps(data, ensure_ascii=False)}")

    try:
        with httpx.Client(timeout=30) as client:
            if method == "GET":
                response = client.get(url)
            else:
                response = client.post(url, json=data)

        print(f"\nStatus: {response.status_code}")

        result = response.json()
        print(f"Response:\n{json.dumps(result, ensure_ascii=False, indent=2)}")

        return response.status_code == 200
    except httpx.ConnectError:
        print("❌ Could not connect to server. Is it running?")
        return False


def main():
    print("="*60)
    print("SHIORI LOOKUP API SMOKE TEST")
    print("="*60)

    # Health check
    if not test_endpoint("Health Check", "GET", "/"):
        print("\n⚠️  Server not running. Start with: cd src && python main.py")
        return

    test_endpoint("Sources", "GET", "/sources")

    # Tapped word with a long conjugation chain
    test_endpoint(
        "Lookup - Complex Verb",
        "POST", "/lookup",
        {"word": "食べられなかった"}
    )

    test_endpoint(
        "Lookup - Dictionary Form, No Deinflection",
        "POST", "/lookup",
        {"word": "食べる", "deinflect": False}
    )

    test_endpoint(
        "Deinflect - Passive + Miru",
        "POST", "/deinflect",
        {"word": "言われてみれば"}
    )

    # Search box: Japanese with prefix fallback, then English
    test_endpoint(
        "Search - Prefix Fallback",
        "POST", "/search",
        {"query": "たべもの"}
    )

    test_endpoint(
        "Search - English",
        "POST", "/search",
        {"query": "run"}
    )

    test_endpoint(
        "Prefix Search - With Imported",
        "POST", "/search/prefix",
        {"prefix": "食べ", "limit": 10, "include_imported": True}
    )

    test_endpoint(
        "Meaning Search",
        "POST", "/search/meaning",
        {"text": "eat", "limit": 10}
    )

    print("\n" + "="*60)
    print("SMOKE TEST COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
