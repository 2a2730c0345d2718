"""Error taxonomy for the kinship engine.

Every error carries a stable ``code`` so API layers can map it without
string matching:

- not_found: focus person or a directly requested id does not exist
- invalid_request: self-link, parent cap exceeded, unknown kind
- integrity_violation: one-sided or mismatched explicit sibling link
- write_conflict: the two-sided write could not be committed
"""

from typing import Optional


class KinshipError(Exception):
    """Base error with a stable error code."""

    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class MemberNotFoundError(KinshipError):
    """A directly requested member does not exist."""

    code = "not_found"

    def __init__(self, member_id: int) -> None:
        super().__init__(f"Member {member_id} not found")
        self.member_id = member_id


class InvalidRequestError(KinshipError, ValueError):
    """Request rejected before touching the store."""

    code = "invalid_request"


class InvalidRelationshipError(InvalidRequestError):
    """Self-link, parent cap exceeded, or unknown relationship kind."""

    def __init__(
        self,
        message: str,
        member_id: Optional[int] = None,
        relative_id: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.member_id = member_id
        self.relative_id = relative_id

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["member_id"] = self.member_id
        d["relative_id"] = self.relative_id
        return d


class SiblingIntegrityError(KinshipError):
    """Explicit sibling link is one-sided or its two sides disagree on type."""

    code = "integrity_violation"

    def __init__(self, person_id: int, other_id: int, detail: str) -> None:
        super().__init__(f"Sibling link {person_id} <-> {other_id}: {detail}")
        self.person_id = person_id
        self.other_id = other_id
        self.detail = detail


class WriteConflictError(KinshipError):
    """Two-sided relationship write could not be committed; safe to retry."""

    code = "write_conflict"
