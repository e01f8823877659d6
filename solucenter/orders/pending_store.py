"""
Store des commandes en attente du retour Webpay (mémoire du processus).
- Clé: token Webpay; valeur: OrderSnapshot.
- Chaque entrée expire après ttl_seconds (checkouts abandonnés) et sweep() les évince.
- claim() réserve une entrée pour un seul envoi de courriel; delete() la retire ensuite.
- Toutes les opérations passent par un verrou unique (handlers async ou threadpool).
Un redémarrage perd les commandes en attente: le courriel est best-effort, Webpay reste la source de vérité.
"""
import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from .models import OrderSnapshot

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ("snapshot", "stored_at", "claimed")

    def __init__(self, snapshot: OrderSnapshot, stored_at: float):
        self.snapshot = snapshot
        self.stored_at = stored_at
        self.claimed = False


class PendingOrderStore:
    def __init__(self, ttl_seconds: float = 3600.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _expired(self, entry: _Entry, now: float) -> bool:
        return self.ttl_seconds > 0 and now - entry.stored_at >= self.ttl_seconds

    def _live_entry(self, key: str) -> Optional[_Entry]:
        # Appelé sous verrou; retire au passage une entrée expirée
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            del self._entries[key]
            logger.info("pending_orders.expired key=%s buy_order=%s", key, entry.snapshot.buy_order)
            return None
        return entry

    def put(self, key: str, snapshot: OrderSnapshot) -> None:
        with self._lock:
            self._entries[key] = _Entry(snapshot, self._clock())

    def get(self, key: str) -> Optional[OrderSnapshot]:
        with self._lock:
            entry = self._live_entry(key)
            return entry.snapshot if entry else None

    def claim(self, key: str) -> Optional[OrderSnapshot]:
        """
        Réserve l'entrée pour l'envoi du courriel.
        - Retourne le snapshot la première fois, None ensuite (déjà réservé), si absent ou expiré.
        - L'entrée reste présente jusqu'à delete(key).
        """
        with self._lock:
            entry = self._live_entry(key)
            if entry is None or entry.claimed:
                return None
            entry.claimed = True
            return entry.snapshot

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def sweep(self) -> int:
        """Évince les entrées expirées; retourne le nombre d'entrées supprimées."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if self._expired(e, now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.info("pending_orders.sweep evicted=%s remaining=%s", len(expired), len(self))
        return len(expired)

    def find_by_buy_order(self, buy_order: str) -> Optional[OrderSnapshot]:
        """Recherche linéaire par buyOrder (consultation de debug); ignore les entrées expirées."""
        with self._lock:
            now = self._clock()
            for entry in self._entries.values():
                if entry.snapshot.buy_order == buy_order and not self._expired(entry, now):
                    return entry.snapshot
        return None

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


_store: Optional[PendingOrderStore] = None

def get_pending_store() -> PendingOrderStore:
    global _store
    if _store is None:
        from solucenter.config import get_settings
        _store = PendingOrderStore(ttl_seconds=get_settings().pending_order_ttl_seconds)
    return _store
