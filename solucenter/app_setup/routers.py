"""
Registre central des routers (API checkout, notifications, health).
- API: payments (checkout + retour Webpay), notifications (/api/test-email), orders (/api/orders/{buy_order})
- Health: health_router
"""
from fastapi import FastAPI
from solucenter.payments import views as payments_views
from solucenter.notifications import views as notifications_views
from solucenter.orders import views as orders_views
from solucenter.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l'application.
    - L'ordre n'a pas d'impact sauf conflits de chemins (évités par préfixes).
    """
    app.include_router(payments_views.router)
    app.include_router(notifications_views.router)
    app.include_router(orders_views.router)
    # Health & monitoring
    app.include_router(health_router)
