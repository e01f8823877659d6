"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Démarre le dispatcher de courriels (file + worker) et la tâche de purge des commandes expirées.
- À l'arrêt: vide la file (borné), arrête la purge et ferme le client HTTP Webpay.
- Variables d'environnement supportées:
  - PENDING_SWEEP_INTERVAL_SECONDS: période de purge (0 = désactivée)
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from solucenter.config import get_settings
from solucenter.notifications.dispatcher import get_dispatcher
from solucenter.orders.pending_store import PendingOrderStore, get_pending_store
from solucenter.payments.webpay_client import close_webpay_client

async def sweep_forever(store: PendingOrderStore, interval_seconds: float) -> None:
    logger = logging.getLogger("uvicorn.error")
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            store.sweep()
        except Exception:
            logger.exception("pending_orders.sweep failed")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Démarre les tâches d'arrière-plan et trace la config Webpay (clé masquée).
    Les logs indiquent l'état effectif pour observabilité.
    """
    logger = logging.getLogger("uvicorn.error")
    settings = get_settings()
    logger.info("Webpay config: %s", settings.webpay_debug())
    if not settings.webpay_api_key or not settings.webpay_commerce_code:
        logger.warning("WEBPAY_COMMERCE_CODE/WEBPAY_API_KEY manquants: les transactions échoueront")
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY manquant: les courriels d'achat ne seront pas envoyés")

    dispatcher = get_dispatcher()
    await dispatcher.start()
    app.state.dispatcher = dispatcher

    sweeper = None
    if settings.pending_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(
            sweep_forever(get_pending_store(), settings.pending_sweep_interval_seconds),
            name="pending-orders-sweeper",
        )
        logger.info("Pending orders sweep every %ss (ttl=%ss)", settings.pending_sweep_interval_seconds, settings.pending_order_ttl_seconds)

    try:
        yield
    finally:
        # Phase shutdown
        if sweeper is not None:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass
        await dispatcher.stop()
        await close_webpay_client()
