class MockAsyncRedis:
    """In-memory subset of redis.asyncio.Redis used by the generation store."""

    def __init__(self):
        self.store = {}
        self.lists = {}
        self.closed = False

    async def incr(self, k):
        self.store[k] = int(self.store.get(k, 0)) + 1
        return self.store[k]

    async def get(self, k):
        return self.store.get(k)

    async def set(self, k, v, ex=None):
        self.store[k] = v

    async def lpush(self, k, *values):
        lst = self.lists.setdefault(k, [])
        for v in values:
            lst.insert(0, v)
        return len(lst)

    async def ltrim(self, k, start, end):
        lst = self.lists.get(k, [])
        self.lists[k] = lst[start:end + 1]

    async def lrange(self, k, start, end):
        lst = self.lists.get(k, [])
        return lst[start:] if end == -1 else lst[start:end + 1]

    async def close(self):
        self.closed = True


class FailingAuditRedis(MockAsyncRedis):
    """Error-audit writes fail; everything else works."""

    async def lpush(self, k, *values):
        raise ConnectionError('redis unavailable')
