from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RuleChain


class FlowConversionError(Exception):
    """Base class for lowering and dependency resolution failures"""


class CycleDetectedError(FlowConversionError):
    """The connection graph of a lowered chain contains a cycle.

    ``chain`` is the partially built chain; it must not be handed to the
    rule engine.
    """

    def __init__(self, chain: "RuleChain", cycle: List[str]):
        self.chain = chain
        self.cycle = list(cycle)
        path = " -> ".join(self.cycle) if self.cycle else "unknown"
        super().__init__(f"cycle detected in the graph: {path}")


class MissingMomentReferenceError(FlowConversionError):
    def __init__(self, chain_id: str, node_id: str):
        self.chain_id = chain_id
        self.node_id = node_id
        super().__init__(f"moment id not found on node '{node_id}' of chain '{chain_id}'")


class ResolutionTimeoutError(FlowConversionError, TimeoutError):
    def __init__(self, fetched_batches: int, total_batches: int, timeout: Optional[float] = None):
        self.fetched_batches = fetched_batches
        self.total_batches = total_batches
        self.timeout = timeout
        super().__init__(
            f"moment resolution exceeded {timeout}s after {fetched_batches}/{total_batches} batches"
        )
