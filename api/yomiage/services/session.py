import json
import logging
import uuid
from dataclasses import asdict, dataclass

import redis.asyncio as redis

from yomiage.config import settings
from yomiage.services.calculation import Calculation

logger = logging.getLogger("yomiage")


class SessionNotFound(KeyError):
    pass


@dataclass
class DrillSession:
    operand_count: int
    min_digits: int
    max_digits: int
    speech_duration_s: float
    calculation: Calculation | None = None
    revealed: bool = False

    def to_json(self) -> str:
        data = asdict(self)
        data["calculation"] = self.calculation.to_dict() if self.calculation else None
        return json.dumps(data)

    @classmethod
    def from_json(cls, raw: str) -> "DrillSession":
        data = json.loads(raw)
        calc = data.pop("calculation", None)
        return cls(
            **data,
            calculation=Calculation.from_dict(calc) if calc else None,
        )


class SessionManager:
    """Drill sessions: settings plus the problem currently on screen."""

    PREFIX = "yomiage:session:"

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    def _key(self, session_id: str) -> str:
        return f"{self.PREFIX}{session_id}"

    async def create(self, session: DrillSession) -> str:
        session_id = str(uuid.uuid4())
        await self.save(session_id, session)
        return session_id

    async def save(self, session_id: str, session: DrillSession):
        await self._redis.set(
            self._key(session_id),
            session.to_json(),
            ex=settings.session_ttl_s,
        )

    async def get(self, session_id: str) -> DrillSession:
        data = await self._redis.get(self._key(session_id))
        if data is None:
            raise SessionNotFound(session_id)
        return DrillSession.from_json(data)

    async def set_problem(self, session_id: str, calculation: Calculation) -> DrillSession:
        """Replace the current problem; the previous one is discarded."""
        session = await self.get(session_id)
        session.calculation = calculation
        session.revealed = False
        await self.save(session_id, session)
        return session

    async def reveal(self, session_id: str) -> DrillSession:
        session = await self.get(session_id)
        session.revealed = True
        await self.save(session_id, session)
        return session

    async def exists(self, session_id: str) -> bool:
        return await self._redis.exists(self._key(session_id)) > 0

    async def delete(self, session_id: str):
        await self._redis.delete(self._key(session_id))
