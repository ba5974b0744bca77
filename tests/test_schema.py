"""Tests for the Pydantic catalog models."""

import pytest
from pydantic import ValidationError

from quote_catalog.core.enums import QuoteSortField, SortDirection
from quote_catalog.core.schema import (
    Author,
    Category,
    Quote,
    QuoteListRequest,
    QuotePage,
    RawQuoteRecord,
)


class TestEntities:
    """Tests for Author, Category and Quote."""

    def test_names_are_stripped(self) -> None:
        """Test surrounding whitespace is removed from names."""
        assert Author(name="  Mark Twain ").name == "Mark Twain"
        assert Category(name=" humor ").name == "humor"

    @pytest.mark.parametrize("model", [Author, Category])
    def test_blank_name_rejected(self, model) -> None:
        """Test blank names fail validation."""
        with pytest.raises(ValidationError):
            model(name="   ")

    def test_quote_defaults(self) -> None:
        """Test a quote starts without id, author or categories."""
        quote = Quote(quote="Some text")
        assert quote.id is None
        assert quote.author is None
        assert quote.author_id is None
        assert quote.categories == []

    def test_quote_author_id(self) -> None:
        """Test author_id reflects the attached author."""
        quote = Quote(quote="Some text", author=Author(id=7, name="Someone"))
        assert quote.author_id == 7

    def test_json_dump(self) -> None:
        """Test nested models serialize for the API."""
        quote = Quote(
            id=1,
            quote="Some text",
            permalink="some-text",
            author=Author(id=2, name="Someone", permalink="someone"),
            categories=[Category(id=3, name="life")],
        )
        assert quote.model_dump(mode="json") == {
            "id": 1,
            "quote": "Some text",
            "permalink": "some-text",
            "author": {"id": 2, "name": "Someone", "permalink": "someone"},
            "categories": [{"id": 3, "name": "life"}],
        }


class TestRawQuoteRecord:
    """Tests for RawQuoteRecord."""

    def test_fields_optional(self) -> None:
        """Test every field may be missing."""
        record = RawQuoteRecord()
        assert (record.quote, record.author, record.category, record.line) == (None,) * 4

    def test_frozen(self) -> None:
        """Test records cannot be modified."""
        record = RawQuoteRecord(quote="text")
        with pytest.raises(ValidationError):
            record.quote = "other"


class TestQueryPayloads:
    """Tests for listing request and page models."""

    def test_request_defaults(self) -> None:
        """Test default listing arguments."""
        request = QuoteListRequest()
        assert request.page == 1
        assert request.limit == 10
        assert request.sort_field == QuoteSortField.ID
        assert request.sort_direction == SortDirection.ASC
        assert request.skip == 0

    def test_skip(self) -> None:
        """Test skip is derived from page and limit."""
        assert QuoteListRequest(page=3, limit=20).skip == 40

    def test_sort_from_string(self) -> None:
        """Test sort values parse from their names."""
        request = QuoteListRequest(sort_field="AUTHOR", sort_direction="DESC")
        assert request.sort_field == QuoteSortField.AUTHOR
        assert request.sort_direction == SortDirection.DESC

    def test_empty_page(self) -> None:
        """Test an empty page has no items and no further pages."""
        page = QuotePage()
        assert page.items == []
        assert page.total_pages == 0
        assert page.has_more is False
