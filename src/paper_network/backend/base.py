from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from paper_network.models import NetworkSubgraph, NodeSummary, PaperInput, PaperNetwork


class SimilarityBackend(Protocol):
    """The similarity/embedding service that computes graphs for us.

    Scores, embeddings and layout are produced on the other side; this
    package only consumes them. Implementations signal fetch failures by
    raising `paper_network.errors.BackendError` (or a subclass).
    """

    async def fetch_initial_graph(self, paper_input: PaperInput) -> PaperNetwork: ...

    async def fetch_expansion_subgraph(
        self, origin_id: str, node_summaries: Sequence[NodeSummary], limit: int
    ) -> NetworkSubgraph: ...
