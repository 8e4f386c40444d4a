"""Tests for the quote log and exports."""

import csv
import json

from hotel_rater.models import Property, RatingResult
from hotel_rater.storage import Storage, export_csv, export_json


class TestStorage:
    """Tests for DuckDB quote storage."""

    def test_save_and_load(self, tmp_path, engine, fl_coastal_property) -> None:
        prop = Property.from_dict({**fl_coastal_property, "property_name": "Gulf Resort"})
        result = engine.rate(prop)

        storage = Storage(tmp_path / "quotes.duckdb")
        quote_id = storage.save_quote(prop, result)
        quotes = storage.load_quotes()
        stored = storage.load_quote(quote_id)
        storage.close()

        assert len(quotes) == 1
        assert quotes[0]["quote_id"] == quote_id
        assert quotes[0]["property_name"] == "Gulf Resort"
        assert quotes[0]["total_estimated_premium"] == result.total_estimated_premium
        assert RatingResult(**quotes[0]["full_result"]) == result
        assert stored["property"]["state"] == "FL"

    def test_limit_and_missing(self, tmp_path, engine) -> None:
        storage = Storage(tmp_path / "quotes.duckdb")
        prop = Property.from_dict({})
        result = engine.rate(prop)
        for _ in range(3):
            storage.save_quote(prop, result)
        assert len(storage.load_quotes(limit=2)) == 2
        assert storage.load_quote("nope") is None
        storage.close()


class TestExport:
    """Tests for CSV/JSON export."""

    def test_export_csv(self, tmp_path, engine, fl_coastal_property) -> None:
        results = [engine.rate({}), engine.rate(fl_coastal_property)]
        path = tmp_path / "out" / "quotes.csv"
        export_csv(results, path)

        with open(path, newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 2
        assert rows[0]["quote"] == "1"
        assert rows[0]["total_estimated_premium"] == str(results[0].total_estimated_premium)
        assert rows[0]["brand_tier"] == ""
        assert "catastrophe-exposed" in rows[1]["warnings"]

    def test_export_json(self, tmp_path, engine) -> None:
        path = tmp_path / "quotes.json"
        export_json([engine.rate({})], path)
        data = json.loads(path.read_text())
        assert data["count"] == 1
        assert data["results"][0]["risk_grade"] == "B - Good"
