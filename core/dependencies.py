from __future__ import annotations

import logging
import time
from typing import Iterable, List, Optional, Tuple

from storage.moment_store import Moment, MomentRepository, new_repository
from .config import MAX_MOMENT_BATCH_SIZE, get_app_config
from .errors import MissingMomentReferenceError, ResolutionTimeoutError
from .models import MomentEdge, RuleChain, RuleDependencyMetadata
from .transformer import ATTRIBUTE, MOMENT, PARAMETER

logger = logging.getLogger(__name__)


def chunk_ids(ids: List[str], size: int) -> List[List[str]]:
    return [ids[i:i + size] for i in range(0, len(ids), size)]


def collect_references(rule_chains: Iterable[RuleChain]) -> Tuple[List[int], List[str]]:
    """Scan lowered chains for parameter and moment references.

    Both lists keep first-seen order without duplicates. A moment node
    without an ``id`` aborts the scan.
    """
    parameters: List[int] = []
    moment_ids: List[str] = []

    for chain in rule_chains:
        for node in chain.nodes:
            configuration = node.configuration or {}
            if node.type == ATTRIBUTE and configuration.get("attribute_type") == PARAMETER:
                parameter = configuration.get("parameter_id")
                if parameter is not None and parameter not in parameters:
                    parameters.append(parameter)
            if node.type == MOMENT:
                moment_id = configuration.get("id")
                if moment_id is None or moment_id == "":
                    raise MissingMomentReferenceError(chain.id, node.id)
                if str(moment_id) not in moment_ids:
                    moment_ids.append(str(moment_id))

    return parameters, moment_ids


def fetch_moments(repository: MomentRepository, moment_ids: List[str], tenant_id: str,
                  batch_size: int = MAX_MOMENT_BATCH_SIZE,
                  timeout: Optional[float] = None) -> List[Moment]:
    """Fetch moments in sequential batches; any repository error aborts the rest"""
    size = max(1, min(batch_size, MAX_MOMENT_BATCH_SIZE))
    batches = chunk_ids(moment_ids, size)
    deadline = time.monotonic() + timeout if timeout is not None else None

    moments: List[Moment] = []
    for index, batch in enumerate(batches):
        if deadline is not None and time.monotonic() >= deadline:
            raise ResolutionTimeoutError(index, len(batches), timeout)
        try:
            moments.extend(repository.batch_get_moments(batch, tenant_id))
        except Exception as e:
            logger.error(f"Moment batch {index + 1}/{len(batches)} failed for tenant {tenant_id}: {e}")
            raise
    return moments


def get_rule_metadata(rule_chains: Iterable[RuleChain], parameter_id: int, tenant_id: str,
                      repository: Optional[MomentRepository] = None,
                      timeout: Optional[float] = None,
                      batch_size: Optional[int] = None) -> RuleDependencyMetadata:
    """Resolve the parameters and moments a set of rule chains depends on.

    When no ``repository`` is given, one is built from the application
    configuration, and only if some chain references a moment. Without an
    explicit ``batch_size`` the configured size is used in that case and the
    store limit otherwise.
    """
    dependent_parameters, moment_ids = collect_references(rule_chains)
    if not moment_ids:
        return RuleDependencyMetadata(
            dependent_parameters=dependent_parameters,
            parameter_id=parameter_id,
        )

    if repository is None:
        config = get_app_config()
        repository = new_repository(config)
        if batch_size is None:
            batch_size = config.moment_batch_size
    if batch_size is None:
        batch_size = MAX_MOMENT_BATCH_SIZE

    logger.info(f"Resolving {len(moment_ids)} moments for parameter {parameter_id}")
    moments = fetch_moments(repository, moment_ids, tenant_id, batch_size=batch_size, timeout=timeout)

    dependent_moments: List[str] = []
    resolved_ids: List[str] = []
    moment_edges: List[MomentEdge] = []
    for moment in moments:
        if moment.moment_id:
            if moment.moment_id not in dependent_moments:
                dependent_moments.append(moment.moment_id)
            moment_edges.append(MomentEdge(source=moment.moment_id, target=moment.id))
        resolved_ids.append(moment.id)

    return RuleDependencyMetadata(
        dependent_parameters=dependent_parameters,
        parameter_id=parameter_id,
        dependent_moments=dependent_moments,
        moment_ids=resolved_ids,
        moment_edges=moment_edges,
    )
