import logging
import os
import threading
from typing import Callable, Sequence

from sunmile.infrastructure.db import connection as db
from sunmile.infrastructure.db import (
    pro_post_repository,
    professional_repository,
    user_repository,
)

logger = logging.getLogger("datastore")

APP_ENV = os.environ.get("APP_ENV", "development")


class Datastore:
    """
    Process-wide datastore state.

    ``ensure_initialized`` opens the pool and, outside production, creates
    the schema. It runs its work once per process no matter how many times
    (or from how many threads) it is called; ``shutdown`` resets the state.
    """

    def __init__(
        self,
        schema_steps: Sequence[Callable[[], None]],
        schema_sync: bool = True,
    ) -> None:
        self._schema_steps = list(schema_steps)
        self.schema_sync = schema_sync
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            db.init_pool()
            if self.schema_sync:
                for step in self._schema_steps:
                    step()
                logger.info("Schema synchronized", extra={"tables": len(self._schema_steps)})
            self._initialized = True
            logger.info("Datastore initialized", extra={"app_env": APP_ENV})

    def shutdown(self) -> None:
        with self._lock:
            db.close_pool()
            self._initialized = False


# Parent tables first: professionals and pro_posts reference them.
datastore = Datastore(
    schema_steps=[
        lambda: user_repository.ensure_table(),
        lambda: professional_repository.ensure_table(),
        lambda: pro_post_repository.ensure_table(),
    ],
    schema_sync=APP_ENV != "production",
)
