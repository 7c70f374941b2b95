"""Connectivity state."""
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

ConnectivityListener = Callable[[bool], None]


class NetworkMonitor:
    """
    Known online/offline state with change listeners.

    Listeners run synchronously and only on an actual change of state.
    """

    def __init__(self, online: bool = True):
        self._online = online
        self._listeners: List[ConnectivityListener] = []

    @property
    def is_online(self) -> bool:
        return self._online

    def add_listener(self, listener: ConnectivityListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ConnectivityListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_online(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        logger.info("Connectivity changed: %s", "online" if online else "offline")
        for listener in list(self._listeners):
            listener(online)

    async def probe(self, api) -> bool:
        """Ask the server's health endpoint and record the result."""
        online = await api.health()
        self.set_online(online)
        return online
