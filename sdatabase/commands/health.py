"""Health check command for the sdatabase CLI."""

from __future__ import annotations

from typing import Optional

from ..db import open_database


def run_health_check(url: Optional[str] = None) -> int:
    """Run health checks against a database."""
    print("🏥 sdatabase Health Check")

    with open_database(url) as db:
        print(f"\n🔍 {db.backend_type}: {db.target}")
        if not db.good():
            print("  ❌ connection: unavailable")
            return 1
        print("  ✅ connection: ok")

        probe = db.query("SELECT 1 AS probe", validate=False)
        if probe == [{"probe": "1"}]:
            print("  ✅ probe: ok")
        else:
            print("  ❌ probe: failed")
            return 1

        print(f"     empty: {db.empty()}")
        print(f"     last insert id: {db.last_insert_id()}")

    print("\n🎉 Database healthy!")
    return 0
