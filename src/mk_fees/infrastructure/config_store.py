"""ConfigStore - reads engine keys from the app_config table.

The table is owned by the admin console; missing keys fall back to Settings.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mk_fees.domain.policy import CONFIG_KEYS, EngineConfig

logger = logging.getLogger(__name__)

_LOAD_CONFIG_SQL = text("""
    SELECT key, value
    FROM app_config
    WHERE key = ANY(:keys)
""")


class ConfigStore:
    def __init__(self, defaults: EngineConfig | None = None) -> None:
        self._defaults = defaults or EngineConfig.from_settings(settings)

    async def load(self, db: AsyncSession) -> EngineConfig:
        rows = (await db.execute(_LOAD_CONFIG_SQL, {"keys": list(CONFIG_KEYS)})).fetchall()
        overrides = {row.key: row.value for row in rows}
        config = self._defaults.with_overrides(overrides)
        logger.debug("Engine config loaded: %d override(s)", len(overrides))
        return config.validate()
