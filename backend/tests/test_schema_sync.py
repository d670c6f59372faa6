from pathlib import Path
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Integer, MetaData, String, Table, create_engine, inspect, text

from survey_api.database import Base
import survey_api.models  # noqa: F401
from survey_api.utils.schema_sync import sync_missing_schema_objects


def test_sync_adds_access_type_to_old_surveys_table():
    db_path = Path(f"./schema_sync_{uuid4().hex}.db").resolve()
    engine = create_engine(f"sqlite:///{db_path}")

    old_metadata = MetaData()
    Table(
        "surveys",
        old_metadata,
        Column("survey_id", String(32), primary_key=True),
        Column("title", String(200), nullable=False),
        Column("owner_id", Integer, nullable=False),
        Column("is_public", Boolean, nullable=False),
        Column("created_at", DateTime, nullable=False),
    )
    old_metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(text(
            "INSERT INTO surveys (survey_id, title, owner_id, is_public, created_at) "
            "VALUES ('legacy', 'Old survey', 1, 1, '2025-05-01 10:00:00')"
        ))

    added = sync_missing_schema_objects(engine, Base.metadata)

    inspector = inspect(engine)
    column_names = {row["name"] for row in inspector.get_columns("surveys")}
    index_names = {row.get("name") for row in inspector.get_indexes("surveys")}

    assert "surveys.access_type" in added
    assert {"access_type", "description", "updated_at"} <= column_names
    assert "idx_surveys_owner_created" in index_names
    # Tables that do not exist yet are left to create_all.
    assert "questions" not in inspector.get_table_names()

    with engine.connect() as conn:
        access_type = conn.execute(text("SELECT access_type FROM surveys WHERE survey_id = 'legacy'")).scalar()
    assert access_type == "public"

    assert sync_missing_schema_objects(engine, Base.metadata) == []

    engine.dispose()
    if db_path.exists():
        db_path.unlink()


def test_sync_adds_value_kind_to_old_answers_table():
    db_path = Path(f"./schema_sync_{uuid4().hex}.db").resolve()
    engine = create_engine(f"sqlite:///{db_path}")

    old_metadata = MetaData()
    Table(
        "answers",
        old_metadata,
        Column("answer_id", Integer, primary_key=True),
        Column("response_id", String(32), nullable=False),
        Column("question_id", Integer, nullable=False),
        Column("value", String, nullable=True),
    )
    old_metadata.create_all(engine)

    added = sync_missing_schema_objects(engine, Base.metadata)

    column_names = {row["name"] for row in inspect(engine).get_columns("answers")}
    assert "value_kind" in column_names
    assert "answers.value_kind" in added
    assert "answers:idx_answers_question" in added

    engine.dispose()
    if db_path.exists():
        db_path.unlink()
