"""
Factory d'application recommandée pour les entrypoints (ex: solucenter.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_request_logging_middleware
from .exceptions import register_exception_handlers
from .routes import register_routes
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares de base (CORS, hosts, proxy) et log des requêtes
      - gestionnaires d'exceptions métier et routes simples
      - tous les routers (checkout, retour Webpay, notifications, health)
    Retour:
      FastAPI prêt à être utilisé par le serveur ASGI.
    """
    app = FastAPI(title="Solucenter Checkout API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_request_logging_middleware(app)
    register_exception_handlers(app)
    register_routes(app)
    register_routers(app)
    return app
