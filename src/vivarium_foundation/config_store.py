"""
ConfigurationStore - keyed cache of configuration objects.

An explicitly constructed object (no process-wide singleton); whoever
composes the application owns its lifetime. Writers are serialized by a
lock and publish a fresh mapping, readers work on the last published one.
"""

import logging
import threading
from types import MappingProxyType
from typing import List, Mapping, Optional, Type, TypeVar

from .configuration import Configuration
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Configuration)


class ConfigurationStore:
    """
    Usage:
        store = ConfigurationStore()
        store.store(FacilityConfiguration.preset("secure"), "secure_facility_config")
        config = store.retrieve("secure_facility_config", FacilityConfiguration)
    """

    def __init__(self):
        self._configurations: Mapping[str, Configuration] = MappingProxyType({})
        self._write_lock = threading.Lock()

    def store(self, configuration: Configuration, key: str) -> None:
        """
        Store a configuration under key, replacing any previous value.

        Raises:
            ConfigurationError: If the value is not a Configuration
        """
        if not isinstance(configuration, Configuration):
            raise ConfigurationError(
                f"Cannot store {type(configuration).__name__} under '{key}': not a configuration"
            )
        with self._write_lock:
            updated = dict(self._configurations)
            updated[key] = configuration
            self._configurations = MappingProxyType(updated)
        logger.debug("Stored %s under %s", type(configuration).__name__, key)

    def retrieve(self, key: str, expected_type: Type[C] = Configuration) -> Optional[C]:
        """
        Get the configuration stored under key.

        Returns None when the key is absent or when the stored value is not
        an instance of expected_type.
        """
        configuration = self._configurations.get(key)
        if configuration is None:
            return None
        if not isinstance(configuration, expected_type):
            logger.debug(
                "Configuration under %s is %s, not %s",
                key,
                type(configuration).__name__,
                expected_type.__name__,
            )
            return None
        return configuration

    def remove(self, key: str) -> None:
        """Remove the configuration under key (no-op when absent)."""
        with self._write_lock:
            if key not in self._configurations:
                return
            updated = dict(self._configurations)
            del updated[key]
            self._configurations = MappingProxyType(updated)

    def clear_all(self) -> None:
        with self._write_lock:
            self._configurations = MappingProxyType({})

    @property
    def all_keys(self) -> List[str]:
        return list(self._configurations)

    def __contains__(self, key: str) -> bool:
        return key in self._configurations

    def __len__(self) -> int:
        return len(self._configurations)
