from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from paper_network.backend import HttpSimilarityBackend, SimilarityBackend
from paper_network.errors import BackendError
from paper_network.graph.filters import NetworkFilters
from paper_network.models import PaperInput
from paper_network.session import ExpansionStatus, NetworkSession
from paper_network.settings import settings

logger = logging.getLogger(__name__)


class SessionOut(BaseModel):
    session_id: str
    network: dict[str, Any]


class NodeDetailOut(BaseModel):
    node: dict[str, Any]
    cluster: dict[str, Any] | None = None
    edges: list[dict[str, Any]] = Field(default_factory=list)
    neighbors: list[dict[str, Any]] = Field(default_factory=list)


class ExpansionOut(BaseModel):
    status: str
    origin_id: str
    stats: dict[str, int] = Field(default_factory=dict)
    network: dict[str, Any]


def create_app(backend: SimilarityBackend | None = None, max_sessions: int | None = None) -> FastAPI:
    backend = backend or HttpSimilarityBackend()
    max_sessions = max_sessions or settings.max_sessions
    sessions: dict[str, NetworkSession] = {}

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        for session in sessions.values():
            await session.aclose()
        sessions.clear()
        aclose = getattr(backend, "aclose", None)
        if aclose is not None:
            await aclose()

    app = FastAPI(title="Paper Network", version="0.1.0", lifespan=lifespan)
    app.state.sessions = sessions

    def _session(sid: str) -> NetworkSession:
        session = sessions.get(sid)
        if session is None or session.displayed is None:
            raise HTTPException(status_code=404, detail=f"Unknown session {sid}")
        return session

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.post("/sessions", response_model=SessionOut)
    async def create_session(paper_input: PaperInput):
        session = NetworkSession(backend)
        try:
            await session.load(paper_input)
        except BackendError as e:
            raise HTTPException(status_code=502, detail=str(e))
        # oldest first: dicts keep insertion order
        while len(sessions) >= max_sessions:
            old_sid = next(iter(sessions))
            logger.info(f"Session limit {max_sessions} reached; closing {old_sid}")
            await sessions.pop(old_sid).aclose()
        sid = uuid.uuid4().hex
        sessions[sid] = session
        return SessionOut(session_id=sid, network=session.displayed.model_dump(mode="json"))

    @app.get("/sessions/{sid}/network")
    async def get_network(sid: str):
        return _session(sid).displayed.model_dump(mode="json")

    @app.get("/sessions/{sid}/nodes/{node_id}", response_model=NodeDetailOut)
    async def get_node(sid: str, node_id: str):
        q = _session(sid).query()
        node = q.find_node(node_id)
        if node is None:
            raise HTTPException(status_code=404, detail=f"Unknown node {node_id}")
        cluster = q.cluster_of(node_id)
        return NodeDetailOut(
            node=node.model_dump(mode="json"),
            cluster=cluster.model_dump(mode="json") if cluster else None,
            edges=[e.model_dump(mode="json") for e in q.edges_of(node_id)],
            neighbors=[n.model_dump(mode="json") for n in q.neighbors_of(node_id)],
        )

    @app.post("/sessions/{sid}/filters")
    async def apply_filters(sid: str, filters: NetworkFilters):
        return _session(sid).apply_filters(filters).model_dump(mode="json")

    @app.post("/sessions/{sid}/expand/{node_id}", response_model=ExpansionOut)
    async def expand(sid: str, node_id: str):
        session = _session(sid)
        if node_id not in session.network.node_ids:
            raise HTTPException(status_code=404, detail=f"Unknown node {node_id}")
        outcome = await session.request_expansion(node_id)
        if outcome.status is ExpansionStatus.BUSY:
            raise HTTPException(status_code=409, detail="An expansion is already in progress")
        if outcome.status is ExpansionStatus.CANCELLED:
            raise HTTPException(status_code=410, detail="Session closed during expansion")
        if outcome.status is ExpansionStatus.FAILED:
            raise HTTPException(status_code=502, detail=outcome.error or "Expansion failed")
        return ExpansionOut(
            status=outcome.status.value,
            origin_id=outcome.origin_id,
            stats=outcome.stats.as_dict() if outcome.stats else {},
            network=session.displayed.model_dump(mode="json"),
        )

    @app.delete("/sessions/{sid}")
    async def close_session(sid: str):
        session = sessions.pop(sid, None)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Unknown session {sid}")
        await session.aclose()
        return {"ok": True}

    return app
