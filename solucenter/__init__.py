"""
Backend Solucenter: checkout Webpay Plus et courriels de confirmation d'achat.
"""
__version__ = "1.0.0"
