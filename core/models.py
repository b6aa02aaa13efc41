from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Base Configuration
# ============================================================================

class ChainConfig(BaseModel):
    """Base configuration for rule-engine payloads (camelCase on the wire)"""
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        validate_assignment=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (for serialization)"""
        return self.model_dump(mode="json", by_alias=True)


# Connections are unconditional until the engine models branch outcomes.
CONNECTION_TRUE = "True"


# ============================================================================
# Rule chain
# ============================================================================

class RuleNode(ChainConfig):
    id: str
    type: str
    name: str = ""
    configuration: Dict[str, Any] = Field(default_factory=dict)


class NodeConnection(ChainConfig):
    from_id: str = Field(alias="fromId")
    to_id: str = Field(alias="toId")
    type: str = CONNECTION_TRUE


class RuleChainBaseInfo(ChainConfig):
    id: str
    name: str = ""
    root: bool = True
    debug_mode: bool = Field(default=False, alias="debugMode")
    tenant_id: str = Field(default="", alias="tenantId")
    additional_info: Dict[str, str] = Field(default_factory=dict, alias="additionalInfo")


class RuleMetadata(ChainConfig):
    first_node_index: int = Field(default=0, alias="firstNodeIndex")
    nodes: List[RuleNode] = Field(default_factory=list)
    connections: List[NodeConnection] = Field(default_factory=list)


class RuleChain(ChainConfig):
    rule_chain: RuleChainBaseInfo = Field(alias="ruleChain")
    metadata: RuleMetadata = Field(default_factory=RuleMetadata)

    @property
    def id(self) -> str:
        return self.rule_chain.id

    @property
    def nodes(self) -> List[RuleNode]:
        return self.metadata.nodes

    @property
    def connections(self) -> List[NodeConnection]:
        return self.metadata.connections

    def get_node(self, node_id: str) -> Optional[RuleNode]:
        for node in self.metadata.nodes:
            if node.id == node_id:
                return node
        return None


# ============================================================================
# Dependency metadata
# ============================================================================

class MomentEdge(ChainConfig):
    source: str
    target: str


class RuleDependencyMetadata(ChainConfig):
    """External references of a set of rule chains.

    The moment fields stay ``None`` when no chain references a moment.
    """
    dependent_parameters: List[int] = Field(default_factory=list)
    parameter_id: int
    dependent_moments: Optional[List[str]] = None
    moment_ids: Optional[List[str]] = None
    moment_edges: Optional[List[MomentEdge]] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
