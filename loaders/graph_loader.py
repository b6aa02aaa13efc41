import os
import logging
from typing import Any, List, Optional

from graph.preprocess import load_json, normalize_raw_to_graph
from graph.schema import Graph
from core.models import RuleChain

logger = logging.getLogger(__name__)


class GraphLoader:
    """Loads editor graphs and lowered rule chains from JSON files"""

    def _read(self, file_path: str, kind: str) -> Any:
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"{kind} file not found: {file_path}")
        return load_json(file_path)

    def load_graph(self, file_path: str) -> Graph:
        """Load a flow graph exported by the editor"""
        try:
            graph = normalize_raw_to_graph(self._read(file_path, "Graph"))
            logger.info(f"Loaded graph {graph.chain_id!r} with {len(graph.nodes)} nodes from {file_path}")
            return graph
        except Exception as e:
            logger.error(f"Failed to load graph from {file_path}: {e}")
            raise

    def load_rule_chains(self, file_path: str) -> List[RuleChain]:
        """Load one rule chain or a list of them (``{"chains": [...]}`` is accepted too)"""
        try:
            raw = self._read(file_path, "Rule chain")
            if isinstance(raw, dict):
                raw = raw["chains"] if "chains" in raw else [raw]
            if not isinstance(raw, list):
                raise ValueError("Rule chain file must hold an object or a list of objects")
            chains = [RuleChain.model_validate(item) for item in raw]
            logger.info(f"Loaded {len(chains)} rule chains from {file_path}")
            return chains
        except Exception as e:
            logger.error(f"Failed to load rule chains from {file_path}: {e}")
            raise


def load_graph(file_path: str) -> Graph:
    """Convenience function to load a graph"""
    return GraphLoader().load_graph(file_path)


def load_rule_chains(file_path: str, loader: Optional[GraphLoader] = None) -> List[RuleChain]:
    """Convenience function to load rule chains"""
    return (loader or GraphLoader()).load_rule_chains(file_path)
