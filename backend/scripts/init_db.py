"""Initialize the database - creates all tables and adds columns missing from an older schema."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from survey_api.database import engine, Base
import survey_api.models  # noqa: F401 - registers all models
from survey_api.utils.schema_sync import sync_missing_schema_objects


def init_db():
    print("Creating all database tables...")
    Base.metadata.create_all(bind=engine)
    added = sync_missing_schema_objects(engine, Base.metadata)
    for name in added:
        print(f"  added {name}")
    print("Database initialized successfully.")


if __name__ == "__main__":
    init_db()
