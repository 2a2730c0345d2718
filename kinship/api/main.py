"""FastAPI surface over the family graph engine."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from kinship.config import Settings, settings as default_settings
from kinship.errors import (
    InvalidRequestError,
    KinshipError,
    MemberNotFoundError,
    SiblingIntegrityError,
    WriteConflictError,
)
from kinship.graph.family.graph import FamilyGraph
from kinship.logging import configure_logging
from kinship.models import Person, RelationKind, SiblingType

ERROR_STATUS = {
    MemberNotFoundError: 404,
    InvalidRequestError: 400,
    SiblingIntegrityError: 409,
    WriteConflictError: 409,
}


class CreateMemberRequest(BaseModel):
    member: Person
    relative_id: Optional[int] = None
    kind: Optional[RelationKind] = None
    sibling_type: Optional[SiblingType] = None


class LinkRequest(BaseModel):
    member_id: int
    relative_id: int
    kind: RelationKind
    sibling_type: Optional[SiblingType] = None


def _graph(request: Request) -> FamilyGraph:
    return request.app.state.graph


def _not_found(member_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Member {member_id} not found")


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Build the API; the engine is created on startup."""
    cfg = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(cfg.log_level)
        app.state.graph = FamilyGraph(cfg)
        yield

    app = FastAPI(title="Kinship API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(KinshipError)
    async def kinship_error_handler(request: Request, exc: KinshipError):
        status = next(
            (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500
        )
        return JSONResponse(status_code=status, content={"success": False, "error": exc.to_dict()})

    @app.post("/api/members")
    def create_member(req: CreateMemberRequest, request: Request):
        person = _graph(request).add_member(req.member, req.relative_id, req.kind, req.sibling_type)
        return {"success": True, "data": person.model_dump(mode="json")}

    @app.get("/api/members")
    def search_members(request: Request, q: str = ""):
        return {"success": True, "data": [p.model_dump(mode="json") for p in _graph(request).search(q)]}

    @app.get("/api/members/{member_id}")
    def get_member(member_id: int, request: Request):
        person = _graph(request).get_member(member_id)
        if person is None:
            raise _not_found(member_id)
        return {"success": True, "data": person.model_dump(mode="json")}

    @app.delete("/api/members/{member_id}")
    def delete_member(member_id: int, request: Request):
        if not _graph(request).delete_member(member_id):
            raise _not_found(member_id)
        return {"success": True}

    @app.get("/api/members/{member_id}/family")
    def get_family(member_id: int, request: Request):
        view = _graph(request).get_immediate_family(member_id)
        if view is None:
            raise _not_found(member_id)
        return {"success": True, "data": view.to_dict()}

    @app.get("/api/members/{member_id}/ancestors")
    def get_ancestors(member_id: int, request: Request):
        tree = _graph(request).get_ancestors(member_id)
        if tree is None:
            raise _not_found(member_id)
        return {"success": True, "data": tree.to_dict()}

    @app.get("/api/members/{member_id}/descendants")
    def get_descendants(member_id: int, request: Request):
        tree = _graph(request).get_descendants(member_id)
        if tree is None:
            raise _not_found(member_id)
        return {"success": True, "data": tree.to_dict()}

    @app.get("/api/members/{member_id}/fan-chart")
    def get_fan_chart(member_id: int, request: Request, generations: Optional[int] = None):
        entries = _graph(request).get_fan_chart(member_id, generations)
        if entries is None:
            raise _not_found(member_id)
        return {"success": True, "data": [e.to_dict() for e in entries]}

    @app.post("/api/relationships")
    def link(req: LinkRequest, request: Request):
        result = _graph(request).link(req.member_id, req.relative_id, req.kind, req.sibling_type)
        return {"success": True, "data": result.to_dict()}

    @app.delete("/api/relationships/{member_id}/{relative_id}/{kind}")
    def unlink(member_id: int, relative_id: int, kind: RelationKind, request: Request):
        result = _graph(request).unlink(member_id, relative_id, kind)
        return {"success": True, "data": result.to_dict()}

    @app.get("/api/integrity")
    def integrity(request: Request):
        issues = _graph(request).check_integrity()
        return {"success": True, "data": [i.to_dict() for i in issues]}

    return app


app = create_app()
