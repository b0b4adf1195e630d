"""
Mailu Builder Shared Environment

The shared environment is the one configuration bundle every workload reads
(by reference, via ``envFrom``). It is filled in two phases:

- phase 1: values derivable from the configuration alone, written through an
  `EnvironmentWriter`; the phase ends with `SharedEnvironment.seal()`.
- phase 2: service-discovery addresses, written through an
  `EnvironmentAppender`, which can add keys but never replace one.
"""

import logging
from typing import Dict, Iterator, Mapping

from ..exceptions import BuildError

logger = logging.getLogger(__name__)


class SharedEnvironment(Mapping[str, str]):
    """Ordered, read-only view over the shared key/value bundle."""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._sealed = False

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return f"SharedEnvironment({state}, {self._data!r})"

    @property
    def sealed(self) -> bool:
        return self._sealed

    def phase1(self) -> 'EnvironmentWriter':
        if self._sealed:
            raise BuildError("Shared environment is sealed; phase-1 values can no longer be written.")
        return EnvironmentWriter(self)

    def seal(self):
        """End phase 1. Afterwards only `appender()` may add keys."""
        self._sealed = True
        logger.debug(f"[Environment] Sealed with {len(self._data)} configuration keys.")

    def appender(self) -> 'EnvironmentAppender':
        if not self._sealed:
            raise BuildError("Shared environment must be sealed before discovery keys are appended.")
        return EnvironmentAppender(self)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._data)


class EnvironmentWriter:
    """Phase-1 view: set (and overwrite) configuration-derived keys."""

    def __init__(self, env: SharedEnvironment):
        self._env = env

    def set(self, key: str, value) -> None:
        if self._env.sealed:
            raise BuildError(f"Cannot set '{key}': shared environment is sealed.")
        self._env._data[key] = str(value)


class EnvironmentAppender:
    """Phase-2 view: add new keys only."""

    def __init__(self, env: SharedEnvironment):
        self._env = env

    def add(self, key: str, value) -> None:
        if key in self._env._data:
            raise BuildError(
                f"Refusing to overwrite shared environment key '{key}' "
                f"(current value '{self._env._data[key]}')."
            )
        self._env._data[key] = str(value)
