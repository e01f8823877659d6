"""
Routes simples (hors routers): liveness et favicon.
- /: indique que le backend répond (utilisé par l'hébergeur et pour un test rapide).
- /favicon.ico: pas de contenu (204) pour éviter des 404 dans les logs.
"""
from fastapi import FastAPI
from fastapi.responses import Response
from starlette.status import HTTP_204_NO_CONTENT

def register_routes(app: FastAPI) -> None:
    @app.get("/", include_in_schema=False)
    def root():
        return {"ok": True, "message": "Backend Solucenter funcionando"}

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=HTTP_204_NO_CONTENT)
