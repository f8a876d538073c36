"""
Language-model oracle for order interpretation.

Best-effort helper: every call is bounded by a timeout and every failure is
reported as OracleError so callers can fall back to the deterministic path.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pedido_bot.core.catalog.models import CatalogProduct
from pedido_bot.core.errors import OracleError
from pedido_bot.integrations.llm.base import BaseLLM

logger = logging.getLogger(__name__)


@dataclass
class OracleEntities:
    """Entities the oracle read from a phrase. Any field may be missing."""
    sku: Optional[str]
    quantity: Optional[int]
    unit: Optional[str]


class OrderOracle(ABC):
    """Contract for the optional order-interpretation oracle."""

    @abstractmethod
    async def split_items(self, text: str) -> list[str]:
        """Split a message into one phrase per product."""

    @abstractmethod
    async def extract_entities(
        self, text: str, products: list[CatalogProduct]
    ) -> Optional[OracleEntities]:
        """Pick the product, quantity and unit mentioned in a phrase."""


SPLIT_PROMPT = """Divide el siguiente mensaje de un cliente en una lista de productos pedidos.

Reglas:
- SOLO divide el texto. No inventes cantidades, unidades ni palabras que no estén en el mensaje.
- Cada elemento debe ser un fragmento literal del mensaje original.
- Mantén el orden original.
- Responde ÚNICAMENTE con un arreglo JSON de cadenas, por ejemplo: ["2 cajas de leche", "3 gaseosas"]

Mensaje:
{text}
"""

EXTRACT_PROMPT = """Del siguiente pedido identifica el producto, la cantidad y la unidad.

Pedido:
{text}

Productos posibles:
{products}

Responde ÚNICAMENTE en formato JSON:
{{"sku": "sku del producto o null", "quantity": número entero o null, "unit": "unidad permitida o null"}}

Reglas:
- Usa solo los SKU y unidades de la lista.
- Si la cantidad o la unidad no aparecen en el pedido, usa null. No las adivines.
"""

SYSTEM_PROMPT = "Eres un asistente que interpreta pedidos de productos. Respondes solo JSON."

_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


class LLMOrderOracle(OrderOracle):
    """Oracle backed by any BaseLLM provider."""

    def __init__(self, llm: BaseLLM, timeout: float = 15.0):
        self.llm = llm
        self.timeout = timeout

    async def _complete(self, prompt: str) -> str:
        try:
            response = await asyncio.wait_for(
                self.llm.complete(
                    prompt=prompt,
                    system_prompt=SYSTEM_PROMPT,
                    temperature=0.0,
                    max_tokens=400,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise OracleError(f"{self.llm.name} timed out after {self.timeout}s") from e
        except Exception as e:
            raise OracleError(f"{self.llm.name} request failed: {e}") from e

        content = (response.content or "").strip()
        if not content:
            raise OracleError(f"{self.llm.name} returned an empty response")
        return content

    async def split_items(self, text: str) -> list[str]:
        content = await self._complete(SPLIT_PROMPT.format(text=text))

        json_match = _ARRAY_PATTERN.search(content)
        if not json_match:
            raise OracleError(f"No JSON array in split response: {content[:80]}")

        try:
            data = json.loads(json_match.group())
        except json.JSONDecodeError as e:
            raise OracleError(f"Malformed split response: {e}") from e

        if not isinstance(data, list) or not all(isinstance(s, str) for s in data):
            raise OracleError("Split response is not a list of strings")
        return data

    async def extract_entities(
        self, text: str, products: list[CatalogProduct]
    ) -> Optional[OracleEntities]:
        products_text = "\n".join(
            f"- {p.sku}: {p.name} (unidades: {', '.join(p.units) or 'unidad'})"
            for p in products
        )
        content = await self._complete(
            EXTRACT_PROMPT.format(text=text, products=products_text)
        )

        json_match = _OBJECT_PATTERN.search(content)
        if not json_match:
            raise OracleError(f"No JSON object in extract response: {content[:80]}")

        try:
            data = json.loads(json_match.group())
        except json.JSONDecodeError as e:
            raise OracleError(f"Malformed extract response: {e}") from e

        if not isinstance(data, dict):
            raise OracleError("Extract response is not an object")

        sku = data.get("sku")
        quantity = data.get("quantity")
        unit = data.get("unit")

        if sku is None and quantity is None and unit is None:
            return None

        return OracleEntities(
            sku=str(sku) if sku is not None else None,
            quantity=quantity if isinstance(quantity, int) and not isinstance(quantity, bool) else None,
            unit=str(unit) if unit is not None else None,
        )
