"""SQLite store for member attributes.

Holds the descriptive half of a Person record. Structural fields
(parents, spouses, children, siblings) live in the RelationshipGraph.
"""

import sqlite3
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from kinship.models import FilterCriteria, Person

ATTRIBUTE_FIELDS = (
    "first_name",
    "last_name",
    "gender",
    "birth_date",
    "birth_place",
    "death_date",
    "death_place",
    "biography",
    "photo_url",
)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MemberStore:
    """Store member attributes in SQLite."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS members (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    first_name TEXT NOT NULL,
                    last_name TEXT NOT NULL DEFAULT '',
                    gender TEXT NOT NULL DEFAULT 'other',
                    birth_date TEXT,
                    birth_place TEXT,
                    death_date TEXT,
                    death_place TEXT,
                    biography TEXT,
                    photo_url TEXT,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_members_last_name ON members(last_name)")

    def add_member(self, person: Person) -> int:
        """Add a member and return the assigned id."""
        values = self._to_row(person.model_dump(include=set(ATTRIBUTE_FIELDS)))
        columns = list(values.keys())
        if person.id is not None:
            columns.insert(0, "id")
            values = {"id": person.id, **values}
        placeholders = ", ".join("?" for _ in columns)
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"INSERT INTO members ({', '.join(columns)}) VALUES ({placeholders})",
                [values[c] for c in columns],
            )
            return cursor.lastrowid

    def get_member(self, member_id: int) -> Optional[Person]:
        """Get member by id."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute(
                "SELECT * FROM members WHERE id = ?", (member_id,)
            ).fetchone()
            return self._row_to_person(row) if row else None

    def get_members(self, member_ids: Iterable[int]) -> list[Person]:
        """Get many members in one query, keeping the order of ``member_ids``.

        Unknown ids are left out of the result.
        """
        ids = list(dict.fromkeys(member_ids))
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                f"SELECT * FROM members WHERE id IN ({placeholders})", ids
            ).fetchall()
        by_id = {row["id"]: self._row_to_person(row) for row in rows}
        return [by_id[i] for i in ids if i in by_id]

    def search(self, query: str) -> list[Person]:
        """Find members by first, last, or full name (case-insensitive)."""
        normalized = query.strip()
        if not normalized:
            return self.get_all()
        pattern = f"%{_escape_like(normalized)}%"
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute("""
                SELECT * FROM members
                WHERE first_name LIKE ? ESCAPE '\\'
                   OR last_name LIKE ? ESCAPE '\\'
                   OR (first_name || ' ' || last_name) LIKE ? ESCAPE '\\'
                ORDER BY id
            """, (pattern, pattern, pattern)).fetchall()
            return [self._row_to_person(row) for row in rows]

    def filter(self, criteria: FilterCriteria) -> list[Person]:
        """Filter members; all given criteria must match."""
        clauses = []
        params: list = []
        if criteria.gender:
            clauses.append("gender = ?")
            params.append(criteria.gender.value)
        if criteria.last_name:
            clauses.append("lower(last_name) = lower(?)")
            params.append(criteria.last_name)
        if criteria.birth_year_start is not None:
            clauses.append("CAST(substr(birth_date, 1, 4) AS INTEGER) >= ?")
            params.append(criteria.birth_year_start)
        if criteria.birth_year_end is not None:
            clauses.append("CAST(substr(birth_date, 1, 4) AS INTEGER) <= ?")
            params.append(criteria.birth_year_end)
        if criteria.birth_year_start is not None or criteria.birth_year_end is not None:
            clauses.append("birth_date IS NOT NULL")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(f"SELECT * FROM members {where} ORDER BY id", params).fetchall()
            return [self._row_to_person(row) for row in rows]

    def update_member(self, member_id: int, **kwargs) -> bool:
        """Update descriptive attributes. Structural fields are ignored."""
        updates = self._to_row({k: v for k, v in kwargs.items() if k in ATTRIBUTE_FIELDS})
        if not updates:
            return False

        set_clause = ", ".join(f"{k} = ?" for k in updates.keys())
        values = list(updates.values()) + [member_id]

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE members SET {set_clause} WHERE id = ?", values
            )
            return cursor.rowcount > 0

    def get_all(self) -> list[Person]:
        """Get all members."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute("SELECT * FROM members ORDER BY id").fetchall()
            return [self._row_to_person(row) for row in rows]

    def all_ids(self) -> list[int]:
        """Get every member id."""
        with sqlite3.connect(self.db_path) as conn:
            return [row[0] for row in conn.execute("SELECT id FROM members ORDER BY id")]

    def delete_member(self, member_id: int) -> bool:
        """Delete a member by id."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM members WHERE id = ?", (member_id,))
            return cursor.rowcount > 0

    def _to_row(self, values: dict) -> dict:
        """Convert model values to column values."""
        row = {}
        for key, value in values.items():
            if isinstance(value, date):
                value = value.isoformat()
            elif hasattr(value, "value"):
                value = value.value
            row[key] = value
        return row

    def _row_to_person(self, row: sqlite3.Row) -> Person:
        """Convert database row to a Person without structural fields."""
        return Person(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"] or "",
            gender=row["gender"] or "other",
            birth_date=row["birth_date"],
            birth_place=row["birth_place"],
            death_date=row["death_date"],
            death_place=row["death_place"],
            biography=row["biography"],
            photo_url=row["photo_url"],
        )
