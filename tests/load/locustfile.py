# Scénario de charge: paniers valides/invalides + retours Webpay sans token
from locust import HttpUser, task, between
import os
import random
import threading

_CART_LOCK = threading.Lock()
_CART_IDX = 0

PRODUCTS = [
    ("KIT-01", "Kit de limpieza", 12990),
    ("FIL-02", "Filtro de agua", 8490),
    ("BOM-03", "Bomba sumergible", 45900),
]

def _next_customer() -> dict:
    global _CART_IDX
    with _CART_LOCK:
        _CART_IDX += 1
        idx = _CART_IDX
    domain = os.getenv("LOCUST_EMAIL_DOMAIN", "example.com").strip() or "example.com"
    return {"name": f"Cliente {idx}", "email": f"cliente{idx}@{domain}"}

def _random_cart() -> list[dict]:
    picked = random.sample(PRODUCTS, k=random.randint(1, len(PRODUCTS)))
    return [{"id": pid, "name": name, "price": price, "quantity": random.randint(1, 3)} for pid, name, price in picked]


class CheckoutUser(HttpUser):
    wait_time = between(0.5, 2.0)

    def on_start(self):
        self.headers = {"Accept": "application/json"}
        self.customer = _next_customer()

    @task(5)
    def checkout(self):
        # Crée une vraie transaction: à lancer contre l'environnement d'intégration Webpay
        with self.client.post(
            "/api/cart/checkout",
            json={"items": _random_cart(), "customer": self.customer},
            headers=self.headers,
            name="POST /api/cart/checkout",
            catch_response=True,
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Checkout failed ({resp.status_code}): {resp.text[:200]}")
                return
            data = resp.json()
            if not data.get("webpayUrl") or not data.get("token"):
                resp.failure("Checkout ok mais 'webpayUrl'/'token' manquant")
            else:
                resp.success()

    @task(2)
    def invalid_cart(self):
        with self.client.post(
            "/api/cart/checkout",
            json={"items": [{"id": "X", "name": "Gratis", "price": 0, "quantity": 1}], "customer": self.customer},
            headers=self.headers,
            name="POST /api/cart/checkout [invalid]",
            catch_response=True,
        ) as resp:
            # 400 attendu: le panier est refusé avant tout appel Webpay
            if resp.status_code == 400:
                resp.success()
            else:
                resp.failure(f"Attendu 400, reçu {resp.status_code}")

    @task(1)
    def return_without_token(self):
        with self.client.post(
            "/api/webpay/retorno",
            data={},
            name="POST /api/webpay/retorno [sin token]",
            allow_redirects=False,
            catch_response=True,
        ) as resp:
            if resp.status_code == 400:
                resp.success()
            else:
                resp.failure(f"Attendu 400, reçu {resp.status_code}")

    @task(1)
    def health(self):
        self.client.get("/health", name="GET /health")
