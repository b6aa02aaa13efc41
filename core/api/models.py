from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models import RuleChain


class ConvertRequest(BaseModel):
    graph: Dict[str, Any]
    tenant_id: str


class ValidationSummary(BaseModel):
    ok: bool
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class ConvertResponse(BaseModel):
    chain: Dict[str, Any]
    validation: ValidationSummary


class RuleMetadataRequest(BaseModel):
    chains: List[RuleChain]
    parameter_id: int
    tenant_id: str
    timeout: Optional[float] = None


class ErrorDetail(BaseModel):
    error: str
    message: str
    cycle: Optional[List[str]] = None
    node_id: Optional[str] = None
    chain_id: Optional[str] = None
