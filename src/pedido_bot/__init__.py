"""
Pedido Bot: conversational order taking over a product catalog.
"""

__version__ = "0.1.0"
