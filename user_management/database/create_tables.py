"""
Script to create all database tables.

Run once against a fresh database to create the users and user_settings
tables. Existing tables are left untouched.

Usage:
    python -m user_management.database.create_tables
"""

from user_management.database.models import Base
from user_management.database.session import create_all_tables, init_engine

if __name__ == "__main__":
    print("Initializing database engine...")
    engine = init_engine()

    print("Creating tables...")
    create_all_tables(engine)

    print("Tables created:")
    for table_name in sorted(Base.metadata.tables):
        print(f"  - {table_name}")
