#!/usr/bin/env python3
"""Script to verify OSRM connectivity and leg pricing."""

import asyncio
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from flexroute.config import settings
from flexroute.services.routing.errors import OracleFailure
from flexroute.services.routing.osrm_client import OSRMClient, check_health


async def _run() -> int:
    print("=" * 60)
    print("OSRM Connection Test")
    print("=" * 60)
    print()

    print("1. Checking OSRM configuration...")
    if not settings.osrm_base_url:
        print("   [ERROR] OSRM base URL is not configured")
        print("   Please set FRP_OSRM_BASE_URL in your .env file")
        return 1
    print(f"   [OK] OSRM Base URL: {settings.osrm_base_url}")
    print(f"   [OK] OSRM Profile: {settings.osrm_profile}")
    print()

    print("2. Testing OSRM health check...")
    if not await check_health():
        print("   [ERROR] OSRM service is not responding")
        return 1
    print("   [OK] OSRM service is healthy and accessible!")
    print()

    print("3. Pricing a sample leg...")
    origin = (52.517037, 13.388860)  # Berlin, Germany
    destination = (52.496891, 13.385983)  # Berlin, Germany
    try:
        async with OSRMClient() as client:
            leg = await client.lookup(origin, destination)
    except OracleFailure as e:
        print(f"   [ERROR] Leg lookup failed: {e}")
        return 1
    print(f"   [OK] Distance: {leg.distance:.1f} meters")
    print(f"   [OK] Duration: {leg.duration:.1f} seconds")
    print()

    print("=" * 60)
    print("[SUCCESS] OSRM is connected and working!")
    print("=" * 60)
    return 0


def main() -> int:
    return asyncio.run(_run())


if __name__ == "__main__":
    sys.exit(main())
