# solucenter.config
from pathlib import Path
import os
import logging
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Webpay, Resend), CORS/hosts
- Expose les réglages du store de commandes en attente et du dispatcher de courriels
- get_settings(): instantané injectable (Depends) pour les vues et les tests
"""

logger = logging.getLogger(__name__)

WEBPAY_INTEGRATION_URL = "https://webpay3gint.transbank.cl/rswebpaytransaction/api/webpay/v1.2"
RESEND_DEFAULT_URL = "https://api.resend.com/emails"

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _float_env(name: str, default: float) -> float:
    raw = _clean_env(os.getenv(name) or "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Valeur invalide pour %s=%r, utilisation de %s", name, raw, default)
        return default

def _list_env(name: str, default: str) -> list:
    return [e.strip() for e in os.getenv(name, default).split(",") if e.strip()]

# Webpay Plus (Transbank): URL de base REST, code de commerce et clé secrète
WEBPAY_BASE_URL = _clean_env(os.getenv("WEBPAY_BASE_URL") or WEBPAY_INTEGRATION_URL).rstrip("/")
WEBPAY_COMMERCE_CODE = _clean_env(os.getenv("WEBPAY_COMMERCE_CODE") or "")
WEBPAY_API_KEY = _clean_env(os.getenv("WEBPAY_API_KEY") or "")
# URL publique de /api/webpay/retorno; FRONTEND_RETURN_URL est l'ancien nom
WEBPAY_RETURN_URL = _clean_env(
    os.getenv("WEBPAY_RETURN_URL") or os.getenv("FRONTEND_RETURN_URL") or "http://localhost:4000/api/webpay/retorno"
)
WEBPAY_TIMEOUT_SECONDS = _float_env("WEBPAY_TIMEOUT_SECONDS", 15.0)

# Frontend qui reçoit les redirections /pago-exitoso et /pago-fallido
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or "http://localhost:5173").rstrip("/")

# Resend: envoi des courriels de confirmation d'achat
RESEND_API_KEY = _clean_env(os.getenv("RESEND_API_KEY") or "")
RESEND_FROM_EMAIL = _clean_env(os.getenv("RESEND_FROM_EMAIL") or "Solucenter <onboarding@resend.dev>")
RESEND_API_URL = _clean_env(os.getenv("RESEND_API_URL") or RESEND_DEFAULT_URL)
PURCHASE_INTERNAL_EMAILS = _list_env(
    "PURCHASE_INTERNAL_EMAILS", "landingpagesolucenter@gmail.com,rodrigo.narvaez@solucenter.cl"
)
NOTIFY_TIMEOUT_SECONDS = _float_env("NOTIFY_TIMEOUT_SECONDS", 20.0)

# Commandes en attente du retour Webpay (mémoire du processus)
PENDING_ORDER_TTL_SECONDS = _float_env("PENDING_ORDER_TTL_SECONDS", 3600.0)
PENDING_SWEEP_INTERVAL_SECONDS = _float_env("PENDING_SWEEP_INTERVAL_SECONDS", 300.0)

# CORS (dev)
CORS_ORIGINS = _list_env("CORS_ORIGINS", "*")
ALLOWED_HOSTS = _list_env("ALLOWED_HOSTS", "localhost,127.0.0.1")


class Settings:
    """
    Instantané de la configuration utilisé par les vues (via Depends(get_settings)).
    Les tests peuvent construire un Settings(...) avec leurs propres valeurs.
    """
    def __init__(
        self,
        webpay_base_url: str = WEBPAY_BASE_URL,
        webpay_commerce_code: str = WEBPAY_COMMERCE_CODE,
        webpay_api_key: str = WEBPAY_API_KEY,
        webpay_return_url: str = WEBPAY_RETURN_URL,
        webpay_timeout_seconds: float = WEBPAY_TIMEOUT_SECONDS,
        frontend_url: str = FRONTEND_URL,
        resend_api_key: str = RESEND_API_KEY,
        resend_from_email: str = RESEND_FROM_EMAIL,
        resend_api_url: str = RESEND_API_URL,
        internal_emails: list | None = None,
        notify_timeout_seconds: float = NOTIFY_TIMEOUT_SECONDS,
        pending_order_ttl_seconds: float = PENDING_ORDER_TTL_SECONDS,
        pending_sweep_interval_seconds: float = PENDING_SWEEP_INTERVAL_SECONDS,
    ):
        self.webpay_base_url = webpay_base_url.rstrip("/")
        self.webpay_commerce_code = webpay_commerce_code
        self.webpay_api_key = webpay_api_key
        self.webpay_return_url = webpay_return_url
        self.webpay_timeout_seconds = webpay_timeout_seconds
        self.frontend_url = frontend_url.rstrip("/")
        self.resend_api_key = resend_api_key
        self.resend_from_email = resend_from_email
        self.resend_api_url = resend_api_url
        self.internal_emails = list(PURCHASE_INTERNAL_EMAILS if internal_emails is None else internal_emails)
        self.notify_timeout_seconds = notify_timeout_seconds
        self.pending_order_ttl_seconds = pending_order_ttl_seconds
        self.pending_sweep_interval_seconds = pending_sweep_interval_seconds

    def webpay_debug(self) -> dict:
        """Vue expurgée de la config Webpay pour les logs de démarrage (jamais la clé)."""
        return {
            "WEBPAY_BASE_URL": self.webpay_base_url,
            "WEBPAY_COMMERCE_CODE": self.webpay_commerce_code,
            "WEBPAY_RETURN_URL": self.webpay_return_url,
            "API_KEY_LENGTH": len(self.webpay_api_key) if self.webpay_api_key else None,
        }


_settings: Settings | None = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
