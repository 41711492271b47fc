import pytest

from marketing_planner.repositories.redis_draft import RedisDraftMedium


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.expiry = {}
        self.closed = False

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiry[key] = ex
        return True

    async def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0

    async def close(self):
        self.closed = True


@pytest.mark.asyncio
async def test_set_refreshes_ttl_and_round_trips():
    medium = RedisDraftMedium(ttl_seconds=60)
    fake = FakeRedis()
    medium._redis = fake

    assert await medium.set("questionnaire_draft:s1", '{"industry": "Retail"}') is True
    assert fake.expiry["questionnaire_draft:s1"] == 60
    assert await medium.get("questionnaire_draft:s1") == '{"industry": "Retail"}'
    assert await medium.delete("questionnaire_draft:s1") is True
    assert await medium.delete("questionnaire_draft:s1") is False


@pytest.mark.asyncio
async def test_zero_ttl_keeps_drafts_forever():
    medium = RedisDraftMedium(ttl_seconds=0)
    fake = FakeRedis()
    medium._redis = fake
    await medium.set("k", "{}")
    assert fake.expiry["k"] is None


@pytest.mark.asyncio
async def test_close_releases_client():
    medium = RedisDraftMedium(ttl_seconds=60)
    fake = FakeRedis()
    medium._redis = fake
    await medium.close()
    assert fake.closed is True
    assert medium._redis is None


def test_keys_are_namespaced():
    assert RedisDraftMedium(ttl_seconds=1).generate_draft_key("questionnaire_draft", "abc") == "questionnaire_draft:abc"
