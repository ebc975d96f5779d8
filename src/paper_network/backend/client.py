from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from paper_network.errors import DecodingError, InvalidResponseError, TransportError
from paper_network.graph.integrity import build_network
from paper_network.http import HttpClientFactory, transient_retry
from paper_network.models import NetworkSubgraph, NodeSummary, PaperInput, PaperNetwork
from paper_network.settings import settings

logger = logging.getLogger(__name__)


class HttpSimilarityBackend:
    """HTTP client for the similarity backend.

    Endpoints:
    - POST /network/generate  {text, input_type}            -> full network
    - POST /network/expand    {node_id, current_nodes, limit} -> subgraph
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Accept": "application/json"}
        api_key = api_key or settings.backend_api_key
        if api_key:
            headers["X-API-Key"] = api_key
        self._client = HttpClientFactory.client(
            base_url=base_url or settings.backend_url, headers=headers, transport=transport
        )

    async def aclose(self):
        await self._client.aclose()

    async def fetch_initial_graph(self, paper_input: PaperInput) -> PaperNetwork:
        data = await self._post(
            "/network/generate",
            {"text": paper_input.text, "input_type": paper_input.input_type.value},
        )
        if isinstance(data, dict) and "input_paper" not in data:
            data = {**data, "input_paper": paper_input.model_dump(mode="json")}
        return build_network(data)

    async def fetch_expansion_subgraph(
        self, origin_id: str, node_summaries: Sequence[NodeSummary], limit: int
    ) -> NetworkSubgraph:
        data = await self._post(
            "/network/expand",
            {
                "node_id": origin_id,
                "current_nodes": [s.model_dump(mode="json") for s in node_summaries],
                "limit": limit,
            },
        )
        try:
            return NetworkSubgraph.model_validate(data)
        except ValidationError as e:
            raise DecodingError(f"Malformed expansion payload: {e}") from e

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        try:
            r = await self._send(path, body)
        except httpx.HTTPError as e:
            logger.warning(f"Backend request {path} failed: {e!r}")
            raise TransportError(f"Request to {path} failed: {e}") from e

        if not r.is_success:
            raise InvalidResponseError(_error_message(r), status_code=r.status_code)
        try:
            return r.json()
        except ValueError as e:
            raise DecodingError(f"Response from {path} is not JSON") from e

    @transient_retry()
    async def _send(self, path: str, body: dict[str, Any]) -> httpx.Response:
        return await self._client.post(path, json=body)


def _error_message(r: httpx.Response) -> str:
    try:
        payload = r.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return f"Backend returned HTTP {r.status_code}"
