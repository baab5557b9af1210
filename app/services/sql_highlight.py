# [파일 설명]
# - 목적: 전체 SQL 문장의 하이라이트/정렬 출력을 HTML 마크업으로 제공한다.
# - 제공 기능: 토큰 단위 span 마크업과 pretty-print 후 하이라이트를 제공한다.
# - 입력/출력: 원문 SQL을 입력으로 받아 HTML 문자열과 오류 목록을 반환한다.
# - 주의 사항: 토크나이징/정렬 알고리즘은 sqlglot에 위임하며 여기서 재구현하지 않는다.
# - 연관 모듈: app.api.mcp 및 app.mcp_streamable_http의 포맷 요청에서 사용된다.
from __future__ import annotations

import html
import logging

from sqlglot import tokenize, transpile
from sqlglot.errors import SqlglotError
from sqlglot.tokens import Token, TokenType

from app.services.safe_sql import summarize_sql

logger = logging.getLogger(__name__)

PRE_CLASS = "highlight highlight-sql"


def _token_types(*names: str) -> frozenset[TokenType]:
    return frozenset(TokenType[name] for name in names if name in TokenType.__members__)


STRING_TOKENS = _token_types(
    "STRING",
    "NATIONAL_STRING",
    "BIT_STRING",
    "HEX_STRING",
    "BYTE_STRING",
    "RAW_STRING",
    "HEREDOC_STRING",
    "UNICODE_STRING",
    "IDENTIFIER",
)
NUMBER_TOKENS = _token_types("NUMBER")
VARIABLE_TOKENS = _token_types("PLACEHOLDER", "PARAMETER", "SESSION_PARAMETER")
WORD_TOKENS = _token_types("VAR")


def highlight_query(sql: str, dialect: str | None = None) -> tuple[str, list[str]]:
    summary = summarize_sql(sql)
    logger.info("highlight_query: sql_len=%s sql_hash=%s", summary["len"], summary["sha256_8"])

    try:
        tokens = tokenize(sql, read=dialect)
    except (SqlglotError, ValueError) as exc:
        logger.info("highlight_query: tokenize failed sql_hash=%s", summary["sha256_8"])
        return _span("error", sql), [f"tokenize_error: {exc}"]

    parts: list[str] = []
    cursor = 0
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        css_class = _token_class(token)
        start = max(token.start, cursor)
        end = token.end + 1
        if index < len(tokens) and _is_named_placeholder(token, tokens[index]):
            css_class = "variable"
            end = tokens[index].end + 1
            index += 1
        if end <= start:
            continue
        parts.append(_gap(sql[cursor:start]))
        parts.append(_span(css_class, sql[start:end]))
        cursor = end
    parts.append(_gap(sql[cursor:]))

    return "".join(parts), []


def format_query(
    sql: str, highlight_only: bool = False, dialect: str | None = None
) -> tuple[str, list[str]]:
    """Highlight ``sql`` and, unless ``highlight_only``, pretty-print it first.

    The pretty-printed form is wrapped in ``<div class="highlight highlight-sql"><pre>``.
    SQL that sqlglot cannot parse is highlighted as written.
    """
    if highlight_only:
        return highlight_query(sql, dialect)

    errors: list[str] = []
    try:
        pretty = ";\n".join(transpile(sql, read=dialect, write=dialect, pretty=True))
    except (SqlglotError, ValueError) as exc:
        summary = summarize_sql(sql)
        logger.info("format_query: parse failed sql_hash=%s", summary["sha256_8"])
        errors.append(f"parse_error: {exc}")
        pretty = sql

    markup, highlight_errors = highlight_query(pretty, dialect)
    errors.extend(highlight_errors)
    return f'<div class="{PRE_CLASS}"><pre>{markup}</pre></div>', errors


def _token_class(token: Token) -> str:
    if token.token_type in STRING_TOKENS:
        return "string"
    if token.token_type in NUMBER_TOKENS:
        return "number"
    if token.token_type in VARIABLE_TOKENS:
        return "variable"
    if token.token_type in WORD_TOKENS:
        return "word"
    if not any(char.isalnum() for char in token.text):
        return "symbol"
    return "keyword"


# ":name" comes back as a COLON token followed by a bare word.
def _is_named_placeholder(token: Token, following: Token) -> bool:
    return (
        token.token_type == TokenType.COLON
        and following.token_type in WORD_TOKENS
        and following.start == token.end + 1
    )


def _gap(text: str) -> str:
    if not text:
        return ""
    if text.strip():
        # Comments are not emitted as tokens.
        return _span("comment", text)
    return html.escape(text, quote=False)


def _span(css_class: str, text: str) -> str:
    return f'<span class="{css_class}">{html.escape(text, quote=False)}</span>'
