"""
Unit tests for the field-map driven normalizer.
"""

from datetime import datetime

import pytest

from app.services.api_fetchers.base import FieldMap
from app.services.api_fetchers.normalizer import normalize, parse_date, resolve_path
from app.services.api_fetchers.providers import GUARDIAN, NEWSAPI, NYTIMES

NOW = datetime(2024, 6, 1, 9, 30, 0)


class TestResolvePath:
    """Tests for dot-path extraction."""

    def test_single_segment(self):
        assert resolve_path({"articles": [1, 2]}, "articles") == [1, 2]

    def test_nested_segments(self):
        payload = {"response": {"results": [{"id": 1}]}}
        assert resolve_path(payload, "response.results") == [{"id": 1}]

    def test_numeric_segment_indexes_list(self):
        payload = {"data": [{"items": ["a"]}, {"items": ["b"]}]}
        assert resolve_path(payload, "data.1.items") == ["b"]

    def test_missing_segment_returns_none(self):
        assert resolve_path({"response": {}}, "response.results") is None
        assert resolve_path({"data": [1]}, "data.5") is None
        assert resolve_path("not a dict", "articles") is None

    def test_empty_path_returns_payload(self):
        assert resolve_path([1, 2], "") == [1, 2]


class TestParseDate:
    """Tests for provider timestamp parsing."""

    def test_iso_with_z(self):
        assert parse_date("2024-01-01T00:00:00Z") == datetime(2024, 1, 1, 0, 0, 0)

    def test_iso_with_offset_converted_to_utc(self):
        assert parse_date("2024-01-01T05:00:00-05:00") == datetime(2024, 1, 1, 10, 0, 0)

    def test_sql_style_formats(self):
        assert parse_date("2024-03-15 08:45:00") == datetime(2024, 3, 15, 8, 45, 0)
        assert parse_date("2024-03-15") == datetime(2024, 3, 15)

    def test_rfc_2822(self):
        assert parse_date("Mon, 01 Jan 2024 12:00:00 GMT") == datetime(2024, 1, 1, 12, 0, 0)

    def test_epoch_seconds(self):
        assert parse_date(0) == datetime(1970, 1, 1)

    @pytest.mark.parametrize("value", [None, "", "   ", "yesterday", True, {"date": "x"}])
    def test_unparseable_returns_none(self, value):
        assert parse_date(value) is None


class TestNormalize:
    """Tests for normalize()."""

    def test_end_to_end_newsapi_payload(self):
        """A complete NewsAPI article maps field for field."""
        payload = {
            "articles": [
                {
                    "title": "X",
                    "description": "d",
                    "content": "c",
                    "author": "A",
                    "category": "Tech",
                    "publishedAt": "2024-01-01T00:00:00Z",
                }
            ]
        }

        articles = normalize(payload, NEWSAPI.field_map, now=NOW)

        assert len(articles) == 1
        article = articles[0]
        assert article.title == "X"
        assert article.description == "d"
        assert article.content == "c"
        assert article.author == "A"
        assert article.category == "Tech"
        assert article.published_at == datetime(2024, 1, 1)
        assert article.published_at_estimated is False

    def test_missing_fields_get_defaults(self):
        """Absent keys fall back to the documented defaults; the date to ingestion time."""
        articles = normalize({"articles": [{}]}, NEWSAPI.field_map, now=NOW)

        article = articles[0]
        assert article.title == "No Title"
        assert article.description == ""
        assert article.content == ""
        assert article.author == "Unknown"
        assert article.category == "General"
        assert article.published_at == NOW
        assert article.published_at_estimated is True

    def test_null_values_get_defaults(self):
        payload = {"articles": [{"title": None, "author": None, "category": None, "publishedAt": None}]}

        article = normalize(payload, NEWSAPI.field_map, now=NOW)[0]

        assert article.title == "No Title"
        assert article.author == "Unknown"
        assert article.category == "General"
        assert article.published_at_estimated is True

    def test_unparseable_date_uses_now(self):
        payload = {"articles": [{"title": "T", "publishedAt": "not a date"}]}

        article = normalize(payload, NEWSAPI.field_map, now=NOW)[0]

        assert article.published_at == NOW
        assert article.published_at_estimated is True

    def test_unmapped_author_uses_default(self):
        """The Guardian has no author field in its map."""
        payload = {
            "response": {
                "results": [
                    {
                        "webTitle": "Headline",
                        "pillarName": "News",
                        "webPublicationDate": "2024-02-02T10:00:00Z",
                    }
                ]
            }
        }

        article = normalize(payload, GUARDIAN.field_map, now=NOW)[0]

        assert article.title == "Headline"
        assert article.description == "Headline"
        assert article.content == "Headline"
        assert article.author == "Unknown"
        assert article.category == "News"
        assert article.published_at == datetime(2024, 2, 2, 10, 0, 0)

    def test_nytimes_mapping(self):
        payload = {
            "results": [
                {
                    "title": "Top story",
                    "abstract": "Summary",
                    "byline": "By Jane Doe",
                    "section": "world",
                    "published_date": "2024-03-01T06:00:00-05:00",
                }
            ]
        }

        article = normalize(payload, NYTIMES.field_map, now=NOW)[0]

        assert article.description == "Summary"
        assert article.content == "Summary"
        assert article.author == "By Jane Doe"
        assert article.category == "world"
        assert article.published_at == datetime(2024, 3, 1, 11, 0, 0)

    def test_order_preserved_and_non_dicts_skipped(self):
        payload = {"articles": [{"title": "first"}, "garbage", None, {"title": "second"}]}

        articles = normalize(payload, NEWSAPI.field_map, now=NOW)

        assert [a.title for a in articles] == ["first", "second"]

    @pytest.mark.parametrize(
        "payload",
        [None, {}, [], "text", {"articles": None}, {"articles": {"title": "not a list"}}, {"status": "error"}],
    )
    def test_empty_or_malformed_payload_returns_empty(self, payload):
        assert normalize(payload, NEWSAPI.field_map, now=NOW) == []

    def test_list_values_reduced_to_first_element(self):
        field_map = FieldMap(
            title_key="title",
            desc_key=None,
            content_key=None,
            author_key="creator",
            category_key="category",
            date_key=None,
            data_path="results",
        )
        payload = {"results": [{"title": "T", "creator": ["First", "Second"], "category": ["politics"]}]}

        article = normalize(payload, field_map, now=NOW)[0]

        assert article.author == "First"
        assert article.category == "politics"

    def test_long_names_truncated(self):
        payload = {"articles": [{"title": "T", "author": "x" * 300}]}

        article = normalize(payload, NEWSAPI.field_map, now=NOW)[0]

        assert len(article.author) == 255

    def test_blank_name_uses_default(self):
        payload = {"articles": [{"title": "T", "author": "   ", "category": ""}]}

        article = normalize(payload, NEWSAPI.field_map, now=NOW)[0]

        assert article.author == "Unknown"
        assert article.category == "General"

    def test_non_string_scalars_stringified(self):
        payload = {"articles": [{"title": 42}]}

        assert normalize(payload, NEWSAPI.field_map, now=NOW)[0].title == "42"
