import pytest

from yomiage.services.session import SessionManager


class FakeRedis:
    """In-memory stand-in for the redis.asyncio calls SessionManager makes."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.ttls[key] = ex

    async def get(self, key):
        return self.data.get(key)

    async def exists(self, key):
        return int(key in self.data)

    async def delete(self, key):
        self.data.pop(key, None)

    async def ping(self):
        return True


@pytest.fixture
def redis_client():
    return FakeRedis()


@pytest.fixture
def session_manager(redis_client):
    return SessionManager(redis_client)
