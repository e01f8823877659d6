from fastapi import APIRouter, Depends

from solucenter.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from solucenter.orders.pending_store import PendingOrderStore, get_pending_store

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root(
    store: PendingOrderStore = Depends(get_pending_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return {
        "ok": True,
        "pending_orders": len(store),
        "dispatcher_running": dispatcher.running,
    }
