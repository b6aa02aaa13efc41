from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Base Configuration
# ============================================================================

class FlowModel(BaseModel):
    """Base model for editor payloads: unknown keys (position, style, ...) are dropped"""
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


# ============================================================================
# Metadata
# ============================================================================

class ValidateFields(FlowModel):
    attribute_category_key: Optional[int] = Field(default=None, alias="attributeCategoryKey")
    entity: Optional[int] = None
    data_type: Optional[str] = Field(default=None, alias="dataType")


class Metadata(FlowModel):
    """Configuration bag attached to a node or block.

    Every field is optional: a missing field means "not applicable to this
    node type". Container nodes use ``nodes``/``edges`` (group blocks) or
    ``blocks`` (conditional, response and default containers).
    """
    name: Optional[str] = None
    attribute_type: Optional[str] = None
    attribute: Optional[List[Any]] = None
    id: Optional[str] = None
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
    blocks: List[BlockNode] = Field(default_factory=list)
    operator: Optional[str] = None
    parameter: Optional[int] = None
    response: Optional[int] = None
    max: Optional[int] = None
    min: Optional[int] = None
    function_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("function_type", "functionType")
    )
    selected: Optional[int] = None
    prompt: Optional[str] = None

    # Information correction keys
    attribute_category_key: Optional[int] = Field(default=None, alias="attributeCategoryKey")
    entity: Optional[int] = None
    data_type: Optional[str] = Field(default=None, alias="dataType")
    relative_operation: Optional[str] = Field(default=None, alias="relativeOperation")
    value: Optional[Any] = None
    relative_days: Optional[int] = Field(default=None, alias="relativeDays")
    attribute_category: Optional[int] = Field(default=None, alias="attributeCategory")
    values: Optional[List[Any]] = Field(default=None, alias="list")

    # Attribute-attribute and entity-entity validation
    validate_type: Optional[str] = Field(default=None, alias="validate")
    validate_fields: Optional[ValidateFields] = Field(default=None, alias="validateFields")
    validate_with: Optional[str] = Field(default=None, alias="validateWith")
    validate_with_fields: Optional[ValidateFields] = Field(default=None, alias="validateWithFields")

    def is_populated(self) -> bool:
        return bool(self.model_fields_set)

    def to_configuration(self) -> Dict[str, Any]:
        """Project the typed metadata into a rule-node configuration mapping.

        Unset fields stay absent; the nested node/edge/block structure is left
        out because callers re-express it as ``NodeIdList``/``edges``.
        """
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude={"nodes", "edges", "blocks"},
        )


# ============================================================================
# Nodes and edges
# ============================================================================

class NodeData(FlowModel):
    type: str = ""
    is_not: bool = Field(default=False, validation_alias=AliasChoices("is_not", "isNot"))
    metadata: Metadata = Field(default_factory=Metadata)
    operator: Optional[str] = None
    selected: Optional[int] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def null_metadata_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class GraphNode(FlowModel):
    id: str = ""
    type: str = ""
    block_name: Optional[str] = None
    data: NodeData = Field(default_factory=NodeData)
    metadata: Metadata = Field(default_factory=Metadata)
    is_not: bool = Field(default=False, validation_alias=AliasChoices("is_not", "isNot"))
    tenant_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("tenant_id", "tenantId")
    )
    operator: Optional[str] = None
    selected: bool = False

    @field_validator("data", "metadata", mode="before")
    @classmethod
    def null_payload_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class BlockNode(FlowModel):
    id: str = ""
    node_data: GraphNode = Field(
        default_factory=GraphNode,
        validation_alias=AliasChoices("data", "nodeData", "NodeData"),
    )
    is_selected: bool = Field(
        default=False, validation_alias=AliasChoices("is_selected", "isSelected")
    )

    @field_validator("node_data", mode="before")
    @classmethod
    def null_node_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def inner_type(self) -> str:
        return self.node_data.type or self.node_data.data.type


class EdgeData(FlowModel):
    operator: str = ""


class GraphEdge(FlowModel):
    id: str = ""
    source: str = ""
    target: str = ""
    source_handle: str = Field(default="", alias="sourceHandle")
    target_handle: str = Field(default="", alias="targetHandle")
    type: str = ""
    data: EdgeData = Field(default_factory=EdgeData)

    @field_validator("data", mode="before")
    @classmethod
    def null_data_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("source_handle", "target_handle", mode="before")
    @classmethod
    def null_handle_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class Graph(FlowModel):
    """A flow graph as produced by the editor.

    ``id`` is kept as the raw JSON value: a number marks a single flow, any
    other value marks one branch of a multi-chain structure.
    """
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
    id: Any = None

    @field_validator("nodes", "edges", mode="before")
    @classmethod
    def null_list_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def has_numeric_id(self) -> bool:
        return is_numeric_id(self.id)

    @property
    def chain_id(self) -> str:
        return format_graph_id(self.id)


def is_numeric_id(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_graph_id(value: Any) -> str:
    """Format a graph id the way a JSON number/string prints: 3.0 -> "3"."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, (int, str)):
        return str(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


Metadata.model_rebuild()
NodeData.model_rebuild()
GraphNode.model_rebuild()
BlockNode.model_rebuild()
Graph.model_rebuild()


# ============================================================================
# Structural results
# ============================================================================

@dataclass
class CycleDetectionResult:
    has_cycle: bool
    cycle: List[str] = field(default_factory=list)


@dataclass
class TopologicalOrder:
    success: bool
    order: List[str]
    cyclic_nodes: List[str]
    start_nodes: List[str] = field(default_factory=list)
    end_nodes: List[str] = field(default_factory=list)


@dataclass
class ValidationReport:
    ok: bool
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    order: List[str] = field(default_factory=list)
    start_nodes: List[str] = field(default_factory=list)
    end_nodes: List[str] = field(default_factory=list)
    isolated_nodes: List[str] = field(default_factory=list)
    duplicate_ids: List[str] = field(default_factory=list)
    dangling_ids: List[str] = field(default_factory=list)
