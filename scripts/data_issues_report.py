#!/usr/bin/env python3
"""
Print the admin data issues report: orphaned accounts and broken references.
Run: python scripts/data_issues_report.py [--json]
"""

import asyncio
import json
import sys
import os

# Add parent dir to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load env
from dotenv import load_dotenv
load_dotenv()

from adapters.web.loader import admin_service
from core.domain.errors import BackendError


async def main(as_json: bool):
    try:
        report = await admin_service.data_issues()
    except BackendError as e:
        print(f"❌ Could not load report: {e.message}")
        sys.exit(1)

    if as_json:
        print(json.dumps(report.model_dump(mode="json"), indent=2))
        return

    print(f"📋 Data issues: {report.total_issues}")
    print(f"\nAuth users without profile ({len(report.auth_orphans)}):")
    for orphan in report.auth_orphans:
        print(f"   {orphan.user_id}  {orphan.email or '-'}  role={orphan.intended_role or '-'}")

    print(f"\nProfiles without auth user ({len(report.profile_orphans)}):")
    for orphan in report.profile_orphans:
        print(f"   {orphan.profile_id}  {orphan.email or '-'}  {orphan.full_name or ''}")

    broken = report.broken_references
    print(f"\nBroken references ({broken.total}):")
    for name, rows in broken.model_dump().items():
        if rows:
            print(f"   {name}: {len(rows)}")


if __name__ == "__main__":
    asyncio.run(main("--json" in sys.argv[1:]))
