from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from core.api import (
    ConvertRequest, ConvertResponse, RuleMetadataRequest,
    build_convert_response, build_error_detail,
)
from core.config import AppConfig, get_app_config
from core.dependencies import get_rule_metadata
from core.errors import CycleDetectedError, MissingMomentReferenceError, ResolutionTimeoutError
from core.runtime.chain_info import convert_and_validate
from storage.moment_store import MomentRepository, new_repository
from dotenv import load_dotenv

load_dotenv()

app = FastAPI(title="Flow to Rule Chain API")


@lru_cache(maxsize=1)
def get_moment_repository() -> MomentRepository:
    """One store (and Redis connection pool) per process, built on first use"""
    return new_repository(get_app_config())


@app.get("/", include_in_schema=False)
def root() -> RedirectResponse:
    return RedirectResponse(url="/docs")


@app.post("/convert", response_model=ConvertResponse)
def convert(body: ConvertRequest) -> ConvertResponse:
    try:
        info = convert_and_validate(body.graph, body.tenant_id)
    except CycleDetectedError as e:
        raise HTTPException(status_code=422, detail=build_error_detail(e).model_dump(exclude_none=True))
    except (ValidationError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return build_convert_response(info.chain, info.report)


@app.post("/rule-metadata")
def rule_metadata(body: RuleMetadataRequest,
                  repository: MomentRepository = Depends(get_moment_repository),
                  config: AppConfig = Depends(get_app_config)) -> Dict[str, Any]:
    try:
        metadata = get_rule_metadata(
            body.chains, body.parameter_id, body.tenant_id,
            repository=repository, timeout=body.timeout,
            batch_size=config.moment_batch_size,
        )
    except MissingMomentReferenceError as e:
        raise HTTPException(status_code=422, detail=build_error_detail(e).model_dump(exclude_none=True))
    except ResolutionTimeoutError as e:
        raise HTTPException(status_code=504, detail=str(e))
    return metadata.to_dict()


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"ok": True}
