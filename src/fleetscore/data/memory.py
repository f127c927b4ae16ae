from __future__ import annotations

import logging
from typing import Any, Optional

from fleetscore.data.engine.session import create_session_factory_from_url
from fleetscore.data.stores.account_store import AccountStore
from fleetscore.data.stores.lock_store import ConfigLockStore
from fleetscore.data.stores.run_store import RunStore
from fleetscore.data.stores.setting_store import SettingStore
from fleetscore.data.stores.signal_store import SignalDefinitionStore

logger = logging.getLogger(__name__)


class Memory:
    """Service locator providing typed access to all FleetScore stores."""

    runs: RunStore
    accounts: AccountStore
    signals: SignalDefinitionStore
    settings: SettingStore
    locks: ConfigLockStore

    def __init__(self, db_url: Optional[str] = None):
        """
        Initialize memory with database connection.

        Args:
            db_url: Optional database URL. If not provided, uses config.db_url

        Raises:
            ConfigurationError: no database URL is configured or it is unreachable.
        """
        if db_url is None:
            from fleetscore.config import get_config
            db_url = get_config().db_url

        self.session_maker = create_session_factory_from_url(db_url)

        self._stores: dict[str, Any] = {}

        self._register_core_stores()

    def _register_core_stores(self):
        core_stores = [
            ("runs", RunStore),
            ("accounts", AccountStore),
            ("signals", SignalDefinitionStore),
            ("settings", SettingStore),
            ("locks", ConfigLockStore),
        ]
        for name, store_class in core_stores:
            self.register_store(name, store_class(self.session_maker, memory=self))

    def register_store(self, name: str, store):
        if name in self._stores:
            logger.error("Store registration failed: %s already exists", name)
            raise ValueError(f"A store named '{name}' is already registered.")
        self._stores[name] = store
        logger.debug("StoreRegistered: %s", name)

    def __getattr__(self, name: str):
        stores = self.__dict__.get("_stores", {})
        if name in stores:
            return stores[name]
        raise AttributeError(f"'Memory' has no attribute '{name}'")
