from __future__ import annotations

import argparse
import json
import os
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple
from urllib import error, request
from urllib.parse import urlencode


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


def to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def fetch_tickets(base_url: str, api_key: str, page_size: int = 1000) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    offset = 0
    while True:
        params: List[Tuple[str, str]] = [
            ("select", "id,pnr,sales_price,purchase_price,profit"),
            ("order", "created_at.asc"),
            ("limit", str(page_size)),
            ("offset", str(offset)),
        ]
        endpoint = f"{base_url}/tickets?{urlencode(params, doseq=True)}"
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        req = request.Request(endpoint, method="GET", headers=headers)
        try:
            with request.urlopen(req, timeout=90) as response:
                batch = json.loads(response.read().decode("utf-8") or "[]")
        except error.HTTPError as exc:
            details = exc.read().decode("utf-8")
            raise RuntimeError(f"Failed loading tickets: HTTP {exc.code} {details}") from exc
        rows.extend(batch)
        if len(batch) < page_size:
            return rows
        offset += page_size


def find_drifted(rows: List[Dict[str, Any]]) -> List[Tuple[Dict[str, Any], Decimal]]:
    drifted: List[Tuple[Dict[str, Any], Decimal]] = []
    for row in rows:
        sales = to_decimal(row.get("sales_price")) or Decimal("0")
        purchase = to_decimal(row.get("purchase_price")) or Decimal("0")
        expected = sales - purchase
        if to_decimal(row.get("profit")) != expected:
            drifted.append((row, expected))
    return drifted


def patch_profit(base_url: str, api_key: str, ticket_id: str, profit: Decimal) -> None:
    endpoint = f"{base_url}/tickets?{urlencode([('id', f'eq.{ticket_id}')])}"
    headers = {
        "apikey": api_key,
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "Prefer": "return=minimal",
    }
    body = json.dumps({"profit": str(profit)}).encode("utf-8")
    req = request.Request(endpoint, data=body, method="PATCH", headers=headers)
    try:
        with request.urlopen(req, timeout=90):
            return
    except error.HTTPError as exc:
        details = exc.read().decode("utf-8")
        raise RuntimeError(f"Failed updating ticket {ticket_id}: HTTP {exc.code} {details}") from exc


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rewrite stored ticket profit so it equals sales price minus purchase price."
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Actually update rows. Without this flag, script runs in dry-run mode.",
    )
    parser.add_argument(
        "--env-file",
        default=os.path.join(os.path.dirname(__file__), "..", ".env"),
        help="Path to .env file.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    load_env_file(os.path.abspath(args.env_file))

    supabase_url = os.environ.get("SUPABASE_URL")
    service_role_key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
    if not supabase_url or not service_role_key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in .env")

    base_url = f"{supabase_url.rstrip('/')}/rest/v1"
    rows = fetch_tickets(base_url, service_role_key)
    drifted = find_drifted(rows)
    print(f"Checked {len(rows)} ticket(s); {len(drifted)} with stale profit.")
    for row, expected in drifted:
        print(f"- {row.get('pnr') or row['id']}: stored {row.get('profit')} expected {expected}")

    if not args.apply:
        print("\nDry run only. Re-run with --apply to rewrite profit.")
        return

    for row, expected in drifted:
        patch_profit(base_url, service_role_key, row["id"], expected)
    print(f"\nUpdated {len(drifted)} ticket(s).")


if __name__ == "__main__":
    main()
