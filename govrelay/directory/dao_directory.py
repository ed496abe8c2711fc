"""Guild to DAO bindings, populated by `!setup` and read when proposals arrive."""
from typing import Dict, Iterator, Optional, Tuple

from govrelay.config import common_settings as settings
from govrelay.data_models.schemas import RegistryEntry
from govrelay.utils.logger import logger


class DaoDirectory:
    """In-memory store mapping a chat guild id to its Govern registry entry.

    One directory is created at startup and injected into the components
    that need it. Bindings live as long as the process.

    `grace_periods` maps DAO names to the seconds to wait between reporting
    and executing; it is applied to entries that carry no grace period yet.
    """

    def __init__(
        self,
        bindings: Optional[Dict[str, RegistryEntry]] = None,
        grace_periods: Optional[Dict[str, int]] = None,
    ):
        self._bindings: Dict[str, RegistryEntry] = dict(bindings or {})
        self.grace_periods = settings.DAO_GRACE_SECONDS if grace_periods is None else grace_periods

    def _with_grace_period(self, dao: RegistryEntry) -> RegistryEntry:
        grace = self.grace_periods.get(dao.name)
        if grace is None or dao.grace_period_seconds is not None:
            return dao
        return dao.model_copy(update={"grace_period_seconds": grace})

    def bind(self, guild_id: str, dao: RegistryEntry) -> Optional[RegistryEntry]:
        """Bind a guild to a DAO, returning the entry it replaces (if any)."""
        dao = self._with_grace_period(dao)
        previous = self._bindings.get(guild_id)
        self._bindings[guild_id] = dao
        if previous is not None and previous.name != dao.name:
            logger.info(f"[DaoDirectory] Guild {guild_id} rebound from '{previous.name}' to '{dao.name}'")
        else:
            logger.info(f"[DaoDirectory] Guild {guild_id} bound to '{dao.name}'")
        if dao.grace_period_seconds is not None:
            logger.info(f"[DaoDirectory] '{dao.name}' executes {dao.grace_period_seconds}s after reporting")
        return previous

    def get(self, guild_id: Optional[str]) -> Optional[RegistryEntry]:
        if not guild_id:
            return None
        return self._bindings.get(guild_id)

    def unbind(self, guild_id: str) -> Optional[RegistryEntry]:
        return self._bindings.pop(guild_id, None)

    def items(self) -> Iterator[Tuple[str, RegistryEntry]]:
        return iter(list(self._bindings.items()))

    def __contains__(self, guild_id: str) -> bool:
        return guild_id in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
