# scripts/setup/init_db.py
"""
Initialize database: creates all tables and, optionally, an ADMIN account.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py --admin-email admin@example.com --admin-password '...'
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables, drop_tables, engine
from app.config import settings
from app.models.enums import UserRole
from app.models.user import User
from app.services.auth_service import get_user_by_email, hash_password, normalize_email
from sqlalchemy import inspect, text


def seed_admin(email: str, password: str, name: str):
    db = SessionLocal()
    try:
        existing = get_user_by_email(db, email)
        if existing:
            existing.role = UserRole.ADMIN.value
            db.commit()
            print(f"✅ {existing.email} already exists: role set to ADMIN")
            return
        if not password:
            print("❌ --admin-password is required to create a new admin")
            sys.exit(1)
        db.add(User(
            name=name,
            email=normalize_email(email),
            password_hash=hash_password(password),
            role=UserRole.ADMIN.value,
            is_active=True,
        ))
        db.commit()
        print(f"✅ Admin account created: {normalize_email(email)}")
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Create Recon Tracker tables")
    parser.add_argument("--reset", action="store_true", help="Drop every table first (destroys data)")
    parser.add_argument("--admin-email", help="Create or promote this account to ADMIN")
    parser.add_argument("--admin-password", help="Password for a newly created admin")
    parser.add_argument("--admin-name", default="Administrator")
    args = parser.parse_args()

    print("🗄️  Recon Tracker DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {engine.url.render_as_string(hide_password=True)}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running and DATABASE_URL is correct.")
        sys.exit(1)

    if args.reset:
        print("\n⚠️  Dropping all tables...")
        drop_tables()

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if args.admin_email:
        seed_admin(args.admin_email, args.admin_password, args.admin_name)

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
