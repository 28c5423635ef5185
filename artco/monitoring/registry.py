"""
Watcher registry: identity → ObservedWatcher, shared between the
scheduler pass and the dispatch path of every worker.
"""

import threading
from typing import Dict, Iterator, List, Optional

from artco.monitoring.watcher import ObservedWatcher


class WatcherRegistry:
    """
    Lock-guarded mapping of service identity to watcher.

    Iteration always works on a copy, so a polling pass never races with
    a registration running on another thread.
    """

    def __init__(self):
        self._watchers: Dict[str, ObservedWatcher] = {}
        self._lock = threading.RLock()

    def put(self, watcher: ObservedWatcher) -> Optional[ObservedWatcher]:
        """Insert *watcher*; returns the watcher it replaced, if any."""
        with self._lock:
            previous = self._watchers.get(watcher.identity)
            self._watchers[watcher.identity] = watcher
            return previous

    def get(self, identity: str) -> Optional[ObservedWatcher]:
        with self._lock:
            return self._watchers.get(identity)

    def pop(self, identity: str) -> Optional[ObservedWatcher]:
        with self._lock:
            return self._watchers.pop(identity, None)

    def is_current(self, watcher: ObservedWatcher) -> bool:
        """True if *watcher* is still the registered one for its identity."""
        with self._lock:
            return self._watchers.get(watcher.identity) is watcher

    def values(self) -> List[ObservedWatcher]:
        with self._lock:
            return list(self._watchers.values())

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._watchers

    def __len__(self) -> int:
        with self._lock:
            return len(self._watchers)

    def __iter__(self) -> Iterator[ObservedWatcher]:
        return iter(self.values())
