"""
Tests for quantity/unit extraction and oracle gap filling.
"""

import pytest

from pedido_bot.core.catalog.models import CatalogProduct
from pedido_bot.core.orders.extractor import (
    EntityResolver,
    Extraction,
    extract,
    extract_quantity,
    resolve_unit,
)
from pedido_bot.integrations.llm.oracle import OracleEntities

from conftest import GASEOSA, LECHE, FakeOracle


UNITS = ["caja", "unidad"]


@pytest.mark.unit
class TestExtractQuantity:
    def test_first_integer(self):
        assert extract_quantity("20 cajas y 3 más") == 20

    def test_number_words_not_recognized(self):
        assert extract_quantity("cinco") is None

    def test_article_counts_as_one(self):
        assert extract_quantity("una cerveza") == 1
        assert extract_quantity("un paquete de arroz") == 1

    def test_container_size_ignored(self):
        assert extract_quantity("leche 1l") is None
        assert extract_quantity("3 botellas de 500 ml") == 3
        assert extract_quantity("gaseosa 2 litros") is None

    def test_volume_word_that_is_a_unit_counts(self):
        assert extract_quantity("5 litros de leche", ["litro", "bidon"]) == 5
        assert extract_quantity("leche 1l", ["litro", "bidon"]) is None
        assert extract_quantity("2 bidones de 5 litros", ["bidon"]) == 2

    def test_decimal_ignored(self):
        assert extract_quantity("1.5 kilos") is None

    def test_zero_is_missing(self):
        assert extract_quantity("0 cajas") is None


@pytest.mark.unit
class TestResolveUnit:
    def test_plural(self):
        assert resolve_unit("20 cajas", UNITS) == "caja"

    def test_typo(self):
        assert resolve_unit("3 unidaes", UNITS) == "unidad"

    def test_short_words_need_exact_match(self):
        assert resolve_unit("de la", ["da"]) is None
        assert resolve_unit("1 kg de arroz", ["kg", "bolsa"]) == "kg"

    def test_no_unit(self):
        assert resolve_unit("leche entera", UNITS) is None

    def test_returns_listed_spelling(self):
        assert resolve_unit("2 BOTELLAS", ["Botella"]) == "Botella"


@pytest.mark.unit
class TestExtract:
    def test_quantity_and_unit(self):
        assert extract("20 cajas", UNITS) == Extraction(quantity=20, unit="caja")

    def test_no_digit(self):
        result = extract("cinco", UNITS)
        assert result.quantity is None
        assert result.missing == "quantity"

    def test_unit_without_quantity_asks_quantity(self):
        result = extract("cajas de leche", UNITS)
        assert result.unit == "caja"
        assert result.missing == "quantity"

    def test_quantity_without_unit(self):
        assert extract("2 leches", UNITS).missing == "unit"

    def test_sold_by_the_litre(self):
        result = extract("5 litros de leche", ("litro", "bidon"))
        assert result == Extraction(quantity=5, unit="litro")
        assert result.missing is None


@pytest.mark.unit
class TestEntityResolver:
    async def test_rules_only(self):
        resolver = EntityResolver()
        assert await resolver.resolve("2 cajas de leche", LECHE) == Extraction(2, "caja")

    async def test_product_without_units_gets_default(self):
        resolver = EntityResolver(default_unit="unidad")
        result = await resolver.resolve("3 gaseosas", GASEOSA)
        assert result == Extraction(3, "unidad")
        assert resolver.allowed_units(GASEOSA) == ("unidad",)

    async def test_oracle_not_called_when_complete(self):
        oracle = FakeOracle(entities=OracleEntities(LECHE.sku, 9, "unidad"))
        result = await EntityResolver(oracle=oracle).resolve("2 cajas de leche", LECHE)
        assert result == Extraction(2, "caja")
        assert oracle.extract_calls == []

    async def test_oracle_fills_only_missing_fields(self):
        oracle = FakeOracle(entities=OracleEntities(LECHE.sku, 9, "unidad"))
        result = await EntityResolver(oracle=oracle).resolve("2 leches", LECHE)
        assert result == Extraction(2, "unidad")

    async def test_oracle_unit_must_be_allowed(self):
        oracle = FakeOracle(entities=OracleEntities(LECHE.sku, None, "pallet"))
        result = await EntityResolver(oracle=oracle).resolve("2 leches", LECHE)
        assert result.unit is None

    async def test_oracle_other_product_ignored(self):
        oracle = FakeOracle(entities=OracleEntities("OTHER", 4, "caja"))
        result = await EntityResolver(oracle=oracle).resolve("leche", LECHE)
        assert result == Extraction(None, None)

    async def test_oracle_failure_falls_back(self):
        result = await EntityResolver(oracle=FakeOracle(fail=True)).resolve("leche", LECHE)
        assert result == Extraction(None, None)

    async def test_oracle_non_positive_quantity_ignored(self):
        oracle = FakeOracle(entities=OracleEntities(None, 0, None))
        result = await EntityResolver(oracle=oracle).resolve("leche", LECHE)
        assert result.quantity is None

    async def test_unit_matching_is_per_product(self):
        product = CatalogProduct(sku="P", name="Papel", short_name="Papel", units=("resma",))
        result = await EntityResolver().resolve("4 cajas de papel", product)
        assert result == Extraction(4, None)
