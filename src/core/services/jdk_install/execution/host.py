"""
L4 Execution — Host capability.

A ``Host`` is the machine an installation targets.  Detection must run
in the host's own environment, so probes are handed to ``Host.run()``
as zero-argument callables.  ``LocalHost`` runs them in-process; other
transports (SSH, agents) implement the same contract.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Host(ABC):
    """Abstract target host.

    To add a transport:
        1. Subclass Host
        2. Implement name, root and run
        3. Raise HostUnavailable from run() when the host is unreachable
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name used in log lines."""

    @property
    @abstractmethod
    def root(self) -> Path:
        """Root directory under which tools are installed on this host."""

    @abstractmethod
    def run(self, task: Callable[[], T]) -> T:
        """Execute ``task`` on the host and return its result."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class LocalHost(Host):
    """The machine this process runs on."""

    def __init__(self, root: Path, name: str = "local"):
        self._root = Path(root)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def root(self) -> Path:
        return self._root

    def run(self, task: Callable[[], T]) -> T:
        logger.debug("Running %s", getattr(task, "__name__", task), extra={"host": self._name})
        return task()
