#!/usr/bin/env python3
"""
Issue or renew a shop's license and print the key.
Run inside the backend container: docker-compose exec backend python issue_license.py <shop_id> [days]
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dukan.core.config import settings
from dukan.core.database import SessionLocal
from dukan.core.errors import AppError
from dukan.services.license_service import issue_license


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Issue or renew a shop license")
    parser.add_argument("shop_id", type=int)
    parser.add_argument("days", type=int, nargs="?", default=settings.default_license_days)
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        lic, key = issue_license(db, args.shop_id, args.days)
    except AppError as e:
        print(f"Error issuing license: {e.message}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"\n{'='*50}")
    print("LICENSE")
    print(f"{'='*50}")
    print(f"Shop ID: {lic.shop_id}")
    print(f"Valid until: {lic.valid_until.isoformat()}")
    print(f"Key: {key}")
    print(f"{'='*50}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
