# repository/audit_repository.py
from typing import Final
from redis.asyncio import Redis
from config.cache import get_redis
from model.decision import AuditRecord
from repository.namespaces import AUDIT

KEY: Final[str] = AUDIT


class AuditRepository:
    """
    Flow:
    - One JSON entry per handled query, appended with RPUSH.
    - Entries are never updated or removed here, and there is no TTL.
    - RPUSH is atomic, so concurrent requests cannot corrupt earlier entries;
      ordering between concurrent requests is not guaranteed.
    """

    def __init__(self, key: str = KEY) -> None:
        self._key = key

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    async def append(self, record: AuditRecord) -> int:
        r = await self._client()
        payload = record.model_dump_json().encode("utf-8")
        return int(await r.rpush(self._key, payload))
