"""
================================================================================
Testes: Parser Genérico (fallback)
================================================================================
"""

from __future__ import annotations

from src.errors import ErrorCodes
from src.ingestion import LogContext
from src.ingestion.generic import parse_generic


def _parse(content: str) -> tuple[list, LogContext]:
    context = LogContext(source="app.log")
    return parse_generic(content, context), context


class TestGenericParser:
    """Testes para parse_generic()."""

    def test_requests_and_statuses(self, generic_log: str) -> None:
        transactions, context = _parse(generic_log)

        assert [(t.method, t.url, t.response_status) for t in transactions] == [
            ("GET", "/api/users", 200),
            ("POST", "https://shop.example.com/orders", 201),
        ]
        assert transactions[0].status_text == "OK"
        assert context.issues == []

    def test_trailing_status_on_same_line(self) -> None:
        transactions, _ = _parse("GET /health 200 3ms\n")
        assert transactions[0].response_status == 200

    def test_status_code_keyword(self) -> None:
        transactions, _ = _parse("PATCH /users/1\nresponse status_code=422\n")
        assert transactions[0].response_status == 422

    def test_request_without_status_is_orphan(self) -> None:
        transactions, context = _parse("GET /a\nGET /b -> 200\n")

        assert transactions[0].orphan == "request"
        assert transactions[0].is_partial
        assert transactions[1].response_status == 200
        assert [i.code for i in context.issues] == [ErrorCodes.ORPHAN_REQUEST]

    def test_status_without_request_is_orphan(self) -> None:
        transactions, context = _parse("HTTP/1.1 503 Service Unavailable\n")

        assert len(transactions) == 1
        assert transactions[0].orphan == "response"
        assert transactions[0].response_status == 503
        assert [i.code for i in context.issues] == [ErrorCodes.ORPHAN_RESPONSE]

    def test_no_http_content(self) -> None:
        transactions, context = _parse("apenas texto\nsem requisições\n")
        assert transactions == []
        assert context.issues == []

    def test_line_numbers(self) -> None:
        transactions, _ = _parse("\n\nDELETE /users/3 -> 204\n")
        assert transactions[0].line == 3
