from __future__ import annotations

from .models import ConvertRequest, ConvertResponse, ValidationSummary, RuleMetadataRequest, ErrorDetail
from .builders import build_convert_response, build_error_detail

__all__ = [
    'ConvertRequest', 'ConvertResponse', 'ValidationSummary', 'RuleMetadataRequest', 'ErrorDetail',
    'build_convert_response', 'build_error_detail'
]
