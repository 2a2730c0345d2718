"""
Seed script for Kinship - Populates the databases with a sample family.

This script:
1. Clears the member and relationship databases
2. Imports the Pendragon family with parents, spouses and children
3. Stores one sibling pair in the legacy untyped format and migrates it

Run this script to start with a clean slate:
    python seed_data.py
"""

from pathlib import Path

from kinship.config import settings
from kinship.graph.family.graph import FamilyGraph
from kinship.graph.relationship_graph import LEGACY_SIBLING, EdgeOp
from kinship.logging import configure_logging

SAMPLE_FAMILY = [
    {"id": 1, "first_name": "Arthur", "last_name": "Pendragon", "gender": "male",
     "birth_date": "0470-01-01", "birth_place": "Tintagel, Cornwall",
     "parents": [4, 5], "spouses": [2], "children": [8], "siblings": [{"id": 6, "type": "half"}]},
    {"id": 2, "first_name": "Guinevere", "last_name": "Pendragon", "gender": "female",
     "birth_date": "0475-01-01", "spouses": [1]},
    {"id": 3, "first_name": "Lancelot", "last_name": "du Lac", "gender": "male",
     "birth_date": "0472-01-01", "birth_place": "Benwick"},
    {"id": 4, "first_name": "Uther", "last_name": "Pendragon", "gender": "male",
     "birth_date": "0440-01-01", "spouses": [5], "children": [1]},
    {"id": 5, "first_name": "Igraine", "last_name": "Pendragon", "gender": "female",
     "birth_date": "0445-01-01", "spouses": [4], "children": [1, 6]},
    {"id": 6, "first_name": "Morgana", "last_name": "Pendragon", "gender": "female",
     "birth_date": "0460-01-01", "parents": [5], "siblings": [{"id": 1, "type": "half"}]},
    {"id": 7, "first_name": "Merlin", "last_name": "Ambrosius", "gender": "male",
     "birth_date": "0450-01-01", "birth_place": "Carmarthen, Wales"},
    {"id": 8, "first_name": "Mordred", "last_name": "Pendragon", "gender": "male",
     "birth_date": "0480-01-01", "parents": [1]},
    {"id": 9, "first_name": "Gawain", "last_name": "Pendragon", "gender": "male",
     "birth_date": "0475-01-01"},
    {"id": 10, "first_name": "Gareth", "last_name": "Pendragon", "gender": "male",
     "birth_date": "0476-01-01"},
]

# Gawain and Gareth were recorded before sibling types existed
LEGACY_SIBLINGS = [
    EdgeOp("store", 9, LEGACY_SIBLING, 10),
    EdgeOp("store", 10, LEGACY_SIBLING, 9),
]


def clear_all_databases():
    """Remove all database files to start fresh."""
    print("=" * 80)
    print("CLEARING ALL DATABASES")
    print("=" * 80)

    for db in (settings.database.members_db_path, settings.database.graph_db_path):
        path = Path(db)
        if path.exists():
            path.unlink()
            print(f"Deleted: {path}")
        else:
            print(f"Not found: {path}")


def seed_sample_data():
    """Import the sample family and print a summary."""
    print("=" * 80)
    print("SEEDING SAMPLE FAMILY DATA")
    print("=" * 80)

    graph = FamilyGraph()
    ids = graph.import_members(SAMPLE_FAMILY)
    print(f"Imported {len(ids)} members")

    graph.repository.graph.apply(LEGACY_SIBLINGS)

    migrated = graph.migrate_legacy_siblings()
    print(f"Migrated {migrated} legacy sibling links")

    family = graph.get_immediate_family(1)
    print(f"\n{family.focus.full_name}")
    print(f"  Parents:  {[p.full_name for p in family.parents]}")
    print(f"  Spouses:  {[p.full_name for p in family.spouses]}")
    print(f"  Children: {[p.full_name for p in family.children]}")
    print(f"  Siblings: {[(s.person.full_name, s.type.value) for s in family.siblings]}")


if __name__ == "__main__":
    configure_logging()
    clear_all_databases()
    seed_sample_data()
