import inspect
from typing import Any


class SyncAndAsyncClient:
    """Calls either form of a client operation through one coroutine.

    Subclass methods are named after the sync operation. The async form
    is the same name with an ``a`` prefix.
    """

    client: Any
    async_call: bool

    async def _execute_method(self, *args, **kwargs):
        name = inspect.stack()[1].function
        if self.async_call:
            return await getattr(self.client, f"a{name}")(*args, **kwargs)
        return getattr(self.client, name)(*args, **kwargs)
