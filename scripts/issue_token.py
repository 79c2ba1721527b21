# scripts/issue_token.py
"""
Issue a development JWT for a user id, optionally granting dynamic access.

Usage:
    python scripts/issue_token.py user_123 [--grant-access]
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.jwt_auth import JWTAuth
from app.db.session import get_db_session, init_db
from app.models.billing import DynamicAccess


def main(argv=None):
    parser = argparse.ArgumentParser(description="Issue a development JWT")
    parser.add_argument("user_id")
    parser.add_argument("--grant-access", action="store_true", help="Mark the user's subscription active")
    args = parser.parse_args(argv)

    if args.grant_access:
        init_db()
        with get_db_session() as db:
            access = db.query(DynamicAccess).filter(DynamicAccess.user_id == args.user_id).first()
            if access:
                access.status = "active"
            else:
                db.add(DynamicAccess(user_id=args.user_id, status="active", provider="manual"))
        print(f"[OK] Dynamic access granted to {args.user_id}")

    print(JWTAuth.create_token(args.user_id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
