"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `solucenter.asgi:app`
  pour servir l'application FastAPI en mode ASGI.
- Toute la configuration de FastAPI est centralisée dans solucenter.app_setup.factory,
  ce fichier ne fait qu'exposer l'instance `app`.
- Un seul worker: les commandes en attente vivent dans la mémoire du processus.
"""

from solucenter.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "solucenter.asgi:app",
        host="0.0.0.0",  # écoute toutes interfaces (Docker/VM)
        port=int(os.getenv("PORT", "4000")),
        reload=True,     # rechargement automatique en dev
    )
