from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from paper_network.backend.base import SimilarityBackend
from paper_network.errors import BackendError
from paper_network.graph.filters import NetworkFilters
from paper_network.graph.merge import MergeStats, merge_expansion
from paper_network.graph.query import GraphQueryEngine
from paper_network.models import NetworkSubgraph, NodeSummary, PaperInput, PaperNetwork
from paper_network.settings import settings

logger = logging.getLogger(__name__)


class ExpansionState(str, Enum):
    IDLE = "idle"
    EXPANDING = "expanding"


class ExpansionStatus(str, Enum):
    EXPANDED = "expanded"
    BUSY = "busy"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class ExpansionOutcome:
    status: ExpansionStatus
    origin_id: str
    network: PaperNetwork | None = None
    stats: MergeStats | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ExpansionStatus.EXPANDED


class NetworkSession:
    """Owns the current graph of one view and serializes expansions.

    The session holds three slots, each only ever replaced as a whole:

    - `network`: the full graph (initial build plus merged expansions)
    - `filters`: the active criteria
    - `displayed`: `filters` applied to `network`

    Expansions follow a two-state machine. A request made while another
    is in flight is answered `busy` immediately; it is never queued.
    """

    def __init__(
        self,
        backend: SimilarityBackend,
        *,
        network: PaperNetwork | None = None,
        expansion_limit: int | None = None,
    ):
        self._backend = backend
        self.expansion_limit = expansion_limit or settings.expansion_limit
        self._filters = NetworkFilters()
        self._network: PaperNetwork | None = None
        self._displayed: PaperNetwork | None = None
        self._state = ExpansionState.IDLE
        self._inflight: asyncio.Future[NetworkSubgraph] | None = None
        self._closed = False
        if network is not None:
            self._set_network(network)

    async def __aenter__(self) -> NetworkSession:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    @property
    def network(self) -> PaperNetwork | None:
        return self._network

    @property
    def displayed(self) -> PaperNetwork | None:
        return self._displayed

    @property
    def filters(self) -> NetworkFilters:
        return self._filters

    @property
    def state(self) -> ExpansionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def query(self) -> GraphQueryEngine:
        if self._displayed is None:
            raise RuntimeError("No network loaded")
        return GraphQueryEngine(self._displayed)

    def _set_network(self, network: PaperNetwork) -> None:
        self._network = network
        self._displayed = self._filters.apply(network)

    async def load(self, paper_input: PaperInput) -> PaperNetwork:
        """Fetch the initial graph for `paper_input`. Backend errors propagate."""
        network = await self._backend.fetch_initial_graph(paper_input)
        self._set_network(network)
        logger.info(
            f"Loaded network: {len(network.nodes)} nodes, {len(network.edges)} edges, "
            f"{len(network.clusters)} clusters"
        )
        return network

    def apply_filters(self, filters: NetworkFilters) -> PaperNetwork:
        if self._network is None:
            raise RuntimeError("No network loaded")
        displayed = filters.apply(self._network)
        self._filters = filters
        self._displayed = displayed
        return displayed

    def _failed(self, origin_id: str, error: str) -> ExpansionOutcome:
        logger.warning(f"Expansion from {origin_id!r} failed: {error}")
        return ExpansionOutcome(status=ExpansionStatus.FAILED, origin_id=origin_id, error=error)

    async def request_expansion(self, node_id: str) -> ExpansionOutcome:
        if self._state is ExpansionState.EXPANDING:
            logger.info(f"Expansion from {node_id!r} rejected: another expansion is in flight")
            return ExpansionOutcome(status=ExpansionStatus.BUSY, origin_id=node_id)
        if self._closed:
            return self._failed(node_id, "session closed")
        base = self._network
        if base is None:
            return self._failed(node_id, "no network loaded")
        if node_id not in base.node_ids:
            return self._failed(node_id, f"unknown node {node_id!r}")

        # no await between the check above and this transition
        self._state = ExpansionState.EXPANDING
        summaries = [NodeSummary.of(n) for n in base.nodes]
        self._inflight = asyncio.ensure_future(
            self._backend.fetch_expansion_subgraph(node_id, summaries, self.expansion_limit)
        )
        try:
            subgraph = await self._inflight
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if self._closed and not (task and task.cancelling()):
                logger.info(f"Expansion from {node_id!r} cancelled by teardown")
                return ExpansionOutcome(status=ExpansionStatus.CANCELLED, origin_id=node_id)
            raise
        except BackendError as e:
            return self._failed(node_id, str(e))
        finally:
            self._inflight = None
            self._state = ExpansionState.IDLE

        if self._closed:
            return ExpansionOutcome(status=ExpansionStatus.CANCELLED, origin_id=node_id)
        if self._network is not base:
            return self._failed(node_id, "network was replaced while expanding")

        result = merge_expansion(base, subgraph, origin_id=node_id)
        self._set_network(result.network)
        return ExpansionOutcome(
            status=ExpansionStatus.EXPANDED,
            origin_id=node_id,
            network=result.network,
            stats=result.stats,
        )

    async def aclose(self) -> None:
        """Tear down: cancel any in-flight expansion and refuse new ones."""
        self._closed = True
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
