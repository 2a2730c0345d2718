"""Check stored relationships for one-sided or mismatched links."""

from pathlib import Path

from kinship.config import settings
from kinship.graph.family.graph import FamilyGraph

db_path = Path(settings.database.members_db_path)

if not db_path.exists():
    print(f"Database not found at: {db_path}")
    exit(1)

print(f"Checking database: {db_path}")
print("=" * 80)

graph = FamilyGraph()
issues = graph.check_integrity()

if not issues:
    print("No integrity issues found")
else:
    for issue in issues:
        print(f"[{issue.kind}] {issue.person_id} -> {issue.other_id}: {issue.detail}")
    print("-" * 80)
    print(f"{len(issues)} issue(s)")
