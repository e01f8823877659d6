"""
Dispatcher des courriels de confirmation (file asyncio + worker unique).
- Le handler du retour Webpay se contente d'appeler enqueue(): la réponse au navigateur
  n'attend jamais Resend.
- Chaque job est tenté une seule fois, borné par timeout_seconds.
- Succès, échec ou timeout: journalisé puis on_done() est toujours appelé (suppression du snapshot).
- start()/stop() sont appelés par le lifespan de l'application.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from solucenter.orders.models import OrderSnapshot
from solucenter.payments.webpay_client import GatewayTransactionResult

logger = logging.getLogger(__name__)

SendFn = Callable[[OrderSnapshot, GatewayTransactionResult], Awaitable[None]]


class NotificationJob:
    def __init__(
        self,
        order: OrderSnapshot,
        result: GatewayTransactionResult,
        on_done: Optional[Callable[[], None]] = None,
    ):
        self.order = order
        self.result = result
        self.on_done = on_done
        self.outcome: Optional[str] = None


class NotificationDispatcher:
    def __init__(self, send: SendFn, timeout_seconds: float = 20.0):
        self._send = send
        self.timeout_seconds = timeout_seconds
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run(), name="notification-dispatcher")
        logger.info("notifications.dispatcher started timeout=%ss", self.timeout_seconds)

    def enqueue(self, job: NotificationJob) -> None:
        """Dépose le job sans attendre son exécution."""
        if self._queue is None:
            raise RuntimeError("NotificationDispatcher non démarré (start() via le lifespan)")
        self._queue.put_nowait(job)
        logger.info("notifications.enqueued buy_order=%s pending=%s", job.order.buy_order, self._queue.qsize())

    async def process(self, job: NotificationJob) -> str:
        """
        Exécute un job: un seul envoi, borné par le timeout.
        Retourne "sent", "failed" ou "timeout"; aucune exception ne remonte.
        """
        buy_order = job.order.buy_order
        try:
            await asyncio.wait_for(self._send(job.order, job.result), timeout=self.timeout_seconds)
            job.outcome = "sent"
            logger.info("notifications.sent buy_order=%s", buy_order)
        except asyncio.TimeoutError:
            job.outcome = "timeout"
            logger.error("notifications.timeout buy_order=%s after %ss", buy_order, self.timeout_seconds)
        except Exception:
            job.outcome = "failed"
            logger.exception("notifications.failed buy_order=%s", buy_order)
        finally:
            if job.on_done is not None:
                try:
                    job.on_done()
                except Exception:
                    logger.exception("notifications.on_done failed buy_order=%s", buy_order)
        return job.outcome

    async def _run(self) -> None:
        if self._queue is None:
            raise RuntimeError("NotificationDispatcher non démarré (start() via le lifespan)")
        while True:
            job = await self._queue.get()
            try:
                await self.process(job)
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Attend que tous les jobs déposés soient traités."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self, drain_timeout: float = 5.0) -> None:
        """Laisse le temps aux jobs en file de se terminer, puis arrête le worker."""
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self.join(), timeout=drain_timeout)
        except asyncio.TimeoutError:
            logger.warning("notifications.dispatcher stop: %s job(s) abandonné(s)", self._queue.qsize() if self._queue else 0)
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        self._queue = None
        logger.info("notifications.dispatcher stopped")


_dispatcher: Optional[NotificationDispatcher] = None

def get_dispatcher() -> NotificationDispatcher:
    global _dispatcher
    if _dispatcher is None:
        from solucenter.config import get_settings
        from solucenter.notifications.email_service import send_purchase_email
        _dispatcher = NotificationDispatcher(send_purchase_email, timeout_seconds=get_settings().notify_timeout_seconds)
    return _dispatcher
