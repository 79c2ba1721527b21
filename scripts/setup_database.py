#!/usr/bin/env python3
# scripts/setup_database.py
"""
Database setup script
- Verifies database connection
- Applies Alembic migrations
- Checks the expected tables exist
"""
import os
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.db.session import test_db_connection
from app.core.config import DATABASE_URL

EXPECTED_TABLES = [
    'qr_codes',
    'user_qr_codes',
    'qr_scans',
    'dynamic_access',
    'transactions',
    'user_profiles',
    'alembic_version',
]


def setup():
    print("=" * 70)
    print("🚀 QRFORGE DATABASE SETUP")
    print("=" * 70)

    # Step 1: Test connection
    print("\n1️⃣  Testing database connection...")
    print(f"   Database: {DATABASE_URL.split('@')[1] if '@' in DATABASE_URL else 'hidden'}")

    if not test_db_connection():
        print("   ❌ Database connection failed!")
        print("   Please check:")
        print("   - PostgreSQL is running")
        print("   - Database exists")
        print("   - .env configuration is correct")
        return 1
    print("   ✅ Database connected successfully")

    # Step 2: Run migrations
    print("\n2️⃣  Running database migrations...")
    result = os.system("alembic upgrade head")
    if result != 0:
        print("   ❌ Migration failed!")
        print("   Try manually: alembic upgrade head")
        return 1
    print("   ✅ All migrations applied")

    # Step 3: Verify tables
    print("\n3️⃣  Verifying database tables...")
    try:
        from sqlalchemy import inspect
        from app.db.session import engine

        tables = inspect(engine).get_table_names()
        missing = [t for t in EXPECTED_TABLES if t not in tables]

        if missing:
            print(f"   ⚠️  Missing tables: {', '.join(missing)}")
        else:
            print(f"   ✅ All {len(EXPECTED_TABLES)} tables created")
            for table in EXPECTED_TABLES:
                print(f"      ✓ {table}")
    except Exception as e:
        print(f"   ⚠️  Could not verify tables: {e}")

    print("\n" + "=" * 70)
    print("✅ DATABASE SETUP COMPLETE!")
    print("=" * 70)
    print("\n🚀 Start Application:")
    print("   python -m uvicorn app.main:app --reload --host 0.0.0.0 --port 8000")
    print("   Visit: http://localhost:8000/docs")
    print("\n" + "=" * 70)

    return 0


if __name__ == "__main__":
    sys.exit(setup())
