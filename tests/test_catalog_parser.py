"""
Tests for catalog spreadsheet parsing.
"""

import pandas as pd
import pytest

from pedido_bot.data.parsers import parse_catalog_file, parse_catalog_frame


pytestmark = pytest.mark.unit


def frame(rows: list[dict]) -> pd.DataFrame:
    return pd.DataFrame(rows)


class TestParseCatalogFrame:
    def test_full_row(self):
        parsed = parse_catalog_frame(frame([{
            "SKU": "LEC-001",
            "Name": "Leche Entera 1L",
            "short_name": "Leche Entera",
            "search_terms": "leche; entera",
            "units": "caja,unidad",
            "unit_codes": "caja=CJ; unidad=UN",
            "facility_code": "2000",
        }]))

        product = parsed.products[0]
        assert product.sku == "LEC-001"
        assert product.search_terms == ("leche", "entera")
        assert product.units == ("caja", "unidad")
        assert product.unit_codes == {"caja": "CJ", "unidad": "UN"}
        assert product.facility_code == "2000"

    def test_defaults(self):
        parsed = parse_catalog_frame(frame([{"sku": 1001.0, "name": "Arroz"}]))
        product = parsed.products[0]
        assert product.sku == "1001"
        assert product.short_name == "Arroz"
        assert product.units == ()
        assert product.facility_code is None

    def test_rows_without_sku_or_name_skipped(self):
        parsed = parse_catalog_frame(frame([
            {"sku": "A", "name": "Arroz"},
            {"sku": None, "name": "Sin sku"},
            {"sku": "B", "name": None},
        ]))
        assert [p.sku for p in parsed.products] == ["A"]
        assert parsed.skipped_rows == [1, 2]

    def test_duplicate_sku_keeps_last(self):
        parsed = parse_catalog_frame(frame([
            {"sku": "A", "name": "Arroz viejo"},
            {"sku": "A", "name": "Arroz nuevo"},
        ]))
        assert [p.name for p in parsed.products] == ["Arroz nuevo"]

    def test_missing_columns(self):
        with pytest.raises(ValueError, match="name"):
            parse_catalog_frame(frame([{"sku": "A"}]))


class TestParseCatalogFile:
    def test_xlsx(self, tmp_path):
        path = tmp_path / "catalogo.xlsx"
        frame([{"sku": "A", "name": "Arroz", "units": "paquete"}]).to_excel(path, index=False)

        parsed = parse_catalog_file(path)
        assert parsed.products[0].units == ("paquete",)

    def test_csv(self, tmp_path):
        path = tmp_path / "catalogo.csv"
        path.write_text("sku,name\n0042,Leche\n", encoding="utf-8")

        # Leading zeros survive because every column is read as text
        assert parse_catalog_file(path).products[0].sku == "0042"

    def test_unsupported(self, tmp_path):
        with pytest.raises(ValueError):
            parse_catalog_file(tmp_path / "catalogo.pdf")
