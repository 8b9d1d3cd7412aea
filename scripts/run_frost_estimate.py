#!/usr/bin/env python3
"""
One-off script to estimate the last spring frost for a location.

Usage:
    python scripts/run_frost_estimate.py LAT LON [YEAR]

Falls back through FROST_RETRY_YEARS previous years when the target year has
no reading at or below freezing.
"""
import asyncio
import sys
from datetime import date

from sowcal.core.config import settings
from sowcal.core.logging import configure_logging
from sowcal.core.errors import FrostNotFound, ScheduleError
from sowcal.schemas.schedule import FrostLocation
from sowcal.services.coordinator import resolve_frost


async def main(argv: list[str]) -> int:
    configure_logging()

    if len(argv) < 2:
        print(__doc__)
        return 2

    lat, lon = float(argv[0]), float(argv[1])
    year = int(argv[2]) if len(argv) > 2 else date.today().year

    try:
        frost = await resolve_frost(FrostLocation(lat, lon, year))
    except FrostNotFound as exc:
        print(f"No frost found: {exc.message}.")
        print(f"Enter a last frost date manually (planner default is {settings.default_last_frost.isoformat()}).")
        return 1
    except ScheduleError as exc:
        print(f"Weather lookup failed ({exc.kind}): {exc.message}")
        return 1

    print(f"Estimated last frost for ({lat:.4f}, {lon:.4f}): {frost.isoformat()}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
