"""SQLite database operations for family tree storage."""

from datetime import datetime, timezone
from pathlib import Path
import sqlite3

from models import Person, Union

PERSON_COLUMNS = (
    "id",
    "full_name",
    "birth_date",
    "death_date",
    "portrait_url",
    "bio",
    "father_id",
    "mother_id",
    "sex",
    "created_at",
)
UNION_COLUMNS = (
    "id",
    "person1_id",
    "person2_id",
    "union_date",
    "divorce_date",
    "type",
    "created_at",
)


def create_database(db_path: Path | str) -> sqlite3.Connection:
    """Create SQLite database with family_member and family_union tables."""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    # Parent and spouse ids are not foreign keys: partial family data is expected
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS family_member (
            id TEXT PRIMARY KEY,
            full_name TEXT NOT NULL,
            birth_date TEXT,
            death_date TEXT,
            portrait_url TEXT,
            bio TEXT,
            father_id TEXT,
            mother_id TEXT,
            sex TEXT,
            created_at TEXT NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS family_union (
            id TEXT PRIMARY KEY,
            person1_id TEXT NOT NULL,
            person2_id TEXT NOT NULL,
            union_date TEXT,
            divorce_date TEXT,
            type TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
    """)

    conn.commit()
    return conn


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def store_data(conn: sqlite3.Connection, persons: list[Person], unions: list[Union]):
    """Insert or replace persons and unions, stamping created_at where it is missing."""
    cursor = conn.cursor()
    stamp = _now()

    cursor.executemany(
        f"""
        INSERT OR REPLACE INTO family_member ({", ".join(PERSON_COLUMNS)})
        VALUES ({", ".join("?" for _ in PERSON_COLUMNS)})
        """,
        [
            (
                p.id,
                p.full_name,
                p.birth_date,
                p.death_date,
                p.portrait_url,
                p.bio,
                p.father_id,
                p.mother_id,
                p.sex,
                p.created_at or stamp,
            )
            for p in persons
        ],
    )

    cursor.executemany(
        f"""
        INSERT OR REPLACE INTO family_union ({", ".join(UNION_COLUMNS)})
        VALUES ({", ".join("?" for _ in UNION_COLUMNS)})
        """,
        [
            (
                u.id,
                u.person1_id,
                u.person2_id,
                u.union_date,
                u.divorce_date,
                u.type,
                u.created_at or stamp,
            )
            for u in unions
        ],
    )

    conn.commit()


def load_members(conn: sqlite3.Connection) -> list[Person]:
    """Load every person, ordered by creation time, deduplicated by id."""
    cursor = conn.cursor()
    cursor.execute(f"SELECT {', '.join(PERSON_COLUMNS)} FROM family_member ORDER BY created_at")
    members = {row[0]: Person(**dict(zip(PERSON_COLUMNS, row))) for row in cursor.fetchall()}
    return list(members.values())


def load_unions(conn: sqlite3.Connection) -> list[Union]:
    """Load every union, ordered by id, deduplicated by id."""
    cursor = conn.cursor()
    cursor.execute(f"SELECT {', '.join(UNION_COLUMNS)} FROM family_union ORDER BY id")
    unions = {row[0]: Union(**dict(zip(UNION_COLUMNS, row))) for row in cursor.fetchall()}
    return list(unions.values())
