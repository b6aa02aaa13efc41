from __future__ import annotations

from graph.schema import ValidationReport
from .models import ConvertResponse, ErrorDetail, ValidationSummary
from ..errors import CycleDetectedError, FlowConversionError, MissingMomentReferenceError
from ..models import RuleChain


def build_convert_response(chain: RuleChain, report: ValidationReport) -> ConvertResponse:
    return ConvertResponse(
        chain=chain.to_dict(),
        validation=ValidationSummary(
            ok=report.ok,
            warnings=report.warnings,
            errors=report.errors,
        ),
    )


def build_error_detail(exc: FlowConversionError) -> ErrorDetail:
    detail = ErrorDetail(error=type(exc).__name__, message=str(exc))
    if isinstance(exc, CycleDetectedError):
        detail.cycle = exc.cycle
        detail.chain_id = exc.chain.id
    elif isinstance(exc, MissingMomentReferenceError):
        detail.node_id = exc.node_id
        detail.chain_id = exc.chain_id
    return detail
