"""
Point d'entrée principal pour le backend FastAPI.

Usage:
    python -m solucenter

Ce mode lance uvicorn directement et lit quelques variables d'environnement:
- PORT: port d'écoute (par défaut 4000)
- UVICORN_RELOAD: active le reload auto en dev ("1"/"true"/"yes")
- LOG_LEVEL: niveau de logs uvicorn (ex: "info", "debug")
"""
import logging
import os
import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 4000))
    # Activer le reload uniquement si explicitement demandé (ex: en local)
    reload_flag = os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")
    log_level = os.environ.get("LOG_LEVEL", "info")
    # Les loggers applicatifs (solucenter.*) suivent le niveau uvicorn
    logging.basicConfig(level=getattr(logging, log_level.upper(), logging.INFO), format="%(levelname)s:     %(name)s - %(message)s")
    uvicorn.run(
        "solucenter.asgi:app",
        host="0.0.0.0",
        port=port,
        reload=reload_flag,
        log_level=log_level,
        workers=1,
    )
