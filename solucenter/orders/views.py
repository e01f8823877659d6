from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from solucenter.orders.pending_store import PendingOrderStore, get_pending_store

router = APIRouter(prefix="/api/orders", tags=["Orders"])

# module solucenter.orders.views
@router.get("/{buy_order}")
def get_pending_order(buy_order: str, store: PendingOrderStore = Depends(get_pending_store)):
    """
    Consulte une commande en attente par buyOrder (debug / tests manuels).
    - 200 {ok, order} tant que le retour Webpay ne l'a pas consommée, 404 {ok:false, message} sinon.
    """
    snapshot = store.find_by_buy_order(buy_order)
    if snapshot is None:
        return JSONResponse({"ok": False, "message": "Orden no encontrada"}, status_code=404)
    return {"ok": True, "order": snapshot.model_dump(by_alias=True)}
