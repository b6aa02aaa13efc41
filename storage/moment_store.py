from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import redis
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from core.config import MAX_MOMENT_BATCH_SIZE, AppConfig

logger = logging.getLogger(__name__)


class Moment(BaseModel):
    """A stored moment record; ``moment_id`` names its parent moment, if any"""
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    moment_id: str = Field(default="", validation_alias=AliasChoices("moment_id", "momentId", "MomentID"))
    tenant_id: str = Field(default="", validation_alias=AliasChoices("tenant_id", "tenantId"))
    name: str = ""


class MomentRepository(ABC):
    """Batch lookup of moments by id, scoped to a tenant.

    Ids that do not exist are simply absent from the result.
    """
    max_batch_size: int = MAX_MOMENT_BATCH_SIZE

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)

    def batch_get_moments(self, moment_ids: List[str], tenant_id: str) -> List[Moment]:
        if len(moment_ids) > self.max_batch_size:
            raise ValueError(
                f"batch of {len(moment_ids)} moment ids exceeds the limit of {self.max_batch_size}"
            )
        if not moment_ids:
            return []
        moments = self._batch_get(list(moment_ids), tenant_id)
        self.logger.debug(f"Fetched {len(moments)}/{len(moment_ids)} moments for tenant {tenant_id}")
        return moments

    @abstractmethod
    def _batch_get(self, moment_ids: List[str], tenant_id: str) -> List[Moment]:
        pass

    @abstractmethod
    def save_moment(self, moment: Moment) -> None:
        pass


class InMemoryMomentRepository(MomentRepository):
    def __init__(self, moments: Optional[Iterable[Moment]] = None) -> None:
        super().__init__()
        self._moments: Dict[Tuple[str, str], Moment] = {}
        for moment in moments or []:
            self.save_moment(moment)

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryMomentRepository":
        """Load moments from a JSON list (or ``{"moments": [...]}``)"""
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if isinstance(raw, dict):
            raw = raw.get("moments", [])
        if not isinstance(raw, list):
            raise ValueError(f"Moments file must hold a list of moments: {path}")
        repo = cls(Moment.model_validate(item) for item in raw)
        logger.info(f"Loaded {len(repo._moments)} moments from {path}")
        return repo

    def _batch_get(self, moment_ids: List[str], tenant_id: str) -> List[Moment]:
        found = (self._moments.get((tenant_id, moment_id)) for moment_id in moment_ids)
        return [moment for moment in found if moment is not None]

    def save_moment(self, moment: Moment) -> None:
        self._moments[(moment.tenant_id, moment.id)] = moment


class RedisMomentRepository(MomentRepository):
    """Moments stored as JSON strings under ``<prefix>:<tenant>:<id>``; one MGET per batch"""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 socket_timeout: Optional[float] = None, key_prefix: str = "moment",
                 client: Optional[Any] = None) -> None:
        super().__init__()
        self.key_prefix = key_prefix
        self.client = client or redis.Redis(
            host=host,
            port=port,
            db=db,
            socket_timeout=socket_timeout,
            decode_responses=True,
        )

    def _key(self, tenant_id: str, moment_id: str) -> str:
        return f"{self.key_prefix}:{tenant_id}:{moment_id}"

    def _batch_get(self, moment_ids: List[str], tenant_id: str) -> List[Moment]:
        raw_values = self.client.mget([self._key(tenant_id, moment_id) for moment_id in moment_ids])
        return [Moment.model_validate_json(raw) for raw in raw_values if raw is not None]

    def save_moment(self, moment: Moment) -> None:
        self.client.set(self._key(moment.tenant_id, moment.id), moment.model_dump_json())


def _memory_repository(config: AppConfig) -> MomentRepository:
    return InMemoryMomentRepository()


def _json_repository(config: AppConfig) -> MomentRepository:
    if not config.moments_file:
        raise ValueError("FLOWCHAIN_MOMENTS_FILE is required for the json moment store")
    return InMemoryMomentRepository.from_json_file(config.moments_file)


def _redis_repository(config: AppConfig) -> MomentRepository:
    return RedisMomentRepository(
        host=config.redis_host,
        port=config.redis_port,
        db=config.redis_db,
        socket_timeout=config.redis_socket_timeout,
    )


REPOSITORY_BACKENDS: Dict[str, Callable[[AppConfig], MomentRepository]] = {
    "memory": _memory_repository,
    "json": _json_repository,
    "redis": _redis_repository,
}


def new_repository(config: AppConfig) -> MomentRepository:
    try:
        factory = REPOSITORY_BACKENDS[config.moment_store]
    except KeyError:
        raise ValueError(f"Unknown moment store backend: {config.moment_store!r}") from None
    logger.info(f"Using {config.moment_store} moment store")
    return factory(config)
