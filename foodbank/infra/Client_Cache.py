"""Per-scope client lookup cache.

Callers own the cache object and its lifetime; switching organization scope
resets the previous scope's entries explicitly.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from foodbank.domain.Client import Client, as_client

logger = logging.getLogger(__name__)


class ClientLookupCache:
    def __init__(self):
        self._clients: Dict[str, List[Client]] = {}
        self._index: Dict[str, Dict[str, Client]] = {}
        self.active_scope: Optional[str] = None

    def activate(self, scope_id: str) -> None:
        """Make ``scope_id`` current, dropping whatever the previous scope cached."""
        if self.active_scope is not None and self.active_scope != scope_id:
            self.reset(self.active_scope)
        self.active_scope = scope_id

    def put(self, scope_id: str, clients: Iterable[Any]) -> None:
        items = [as_client(c) for c in (clients or [])]
        self._clients[scope_id] = items
        self._index[scope_id] = {c.id: c for c in items if c.id}
        logger.debug("Cached %d clients for %s", len(items), scope_id)

    def get(self, scope_id: str) -> Optional[List[Client]]:
        items = self._clients.get(scope_id)
        return list(items) if items is not None else None

    def by_id(self, scope_id: str) -> Dict[str, Client]:
        return dict(self._index.get(scope_id, {}))

    def lookup(self, scope_id: str, client_id: str) -> Optional[Client]:
        return self._index.get(scope_id, {}).get(client_id)

    def reset(self, scope_id: Optional[str] = None) -> None:
        """Forget one scope, or everything when ``scope_id`` is None."""
        if scope_id is None:
            self._clients.clear()
            self._index.clear()
            self.active_scope = None
            return
        self._clients.pop(scope_id, None)
        self._index.pop(scope_id, None)
        if self.active_scope == scope_id:
            self.active_scope = None

    def __contains__(self, scope_id: str) -> bool:
        return scope_id in self._clients
