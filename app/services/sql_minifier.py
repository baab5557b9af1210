# [파일 설명]
# - 목적: SQL 문장을 프로파일러 한 줄에 들어가는 요약 문자열로 축약한다.
# - 제공 기능: 문장 유형 분류, 선택 키워드 조합 생성, 키워드 패턴 매칭, 값 축약을 제공한다.
# - 입력/출력: 원문 SQL을 입력으로 받아 폭 제한을 목표로 한 한 줄 요약을 반환한다.
# - 주의 사항: SQL 파서가 아니며 정규식 기반의 휴리스틱 결과만 제공한다.
# - 연관 모듈: sql_escape(값 이스케이프), app.api.mcp(HTTP 노출)와 연동된다.
from __future__ import annotations

import itertools
import logging
import re
import textwrap
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache

from app.services.safe_sql import summarize_sql
from app.services.sql_escape import escape_value

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHAR_WIDTH = 100
VALUE_OVERHEAD = 5
TRUNCATION_MARKER = " [...]"

NUMERIC_PATTERN = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")


@dataclass(frozen=True)
class StatementFamily:
    name: str
    keywords: tuple[str, ...]
    required: int

    @property
    def mandatory(self) -> tuple[str, ...]:
        return self.keywords[: self.required]

    @property
    def optional(self) -> tuple[str, ...]:
        return self.keywords[self.required :]


# Checked in order, first hit wins.
STATEMENT_FAMILIES = (
    StatementFamily("select", ("SELECT", "FROM", "WHERE", "HAVING", "ORDER BY", "LIMIT"), 2),
    StatementFamily("delete", ("DELETE", "FROM", "WHERE", "ORDER BY", "LIMIT"), 2),
    StatementFamily("update", ("UPDATE", "SET", "WHERE", "ORDER BY", "LIMIT"), 2),
    StatementFamily("insert", ("INSERT", "INTO", "VALUE", "VALUES"), 2),
)


def classify_statement(query: str) -> StatementFamily | None:
    upper_query = query.upper()
    for family in STATEMENT_FAMILIES:
        if family.keywords[0] in upper_query:
            return family
    return None


def keyword_combinations(elements: Sequence[str], level: int) -> list[tuple[str, ...]]:
    """Every ``level``-long subsequence of ``elements`` keeping their order.

    Results come in lexicographic order of the chosen indices, so
    ``("WHERE", "HAVING")`` is produced before ``("WHERE", "LIMIT")``.
    """
    if level < 1:
        return []
    return list(itertools.combinations(elements, level))


@lru_cache(maxsize=256)
def _compile_keyword_pattern(keywords: tuple[str, ...], mandatory_only: bool) -> re.Pattern[str]:
    escaped = [re.escape(keyword) for keyword in keywords]
    if mandatory_only:
        body = " (.*)".join(escaped) + " (.*)"
    else:
        body = "(.*) ".join(escaped) + " (.*)"
    return re.compile("^" + body, re.IGNORECASE | re.DOTALL)


def match_keywords(
    query: str, keywords: Sequence[str], *, mandatory_only: bool = False
) -> list[str] | None:
    """Match ``keywords`` in sequence from the start of ``query``.

    Returns the text captured after each keyword, or ``None`` when the
    sequence does not occur.
    """
    pattern = _compile_keyword_pattern(tuple(keywords), mandatory_only)
    match = pattern.match(query)
    if match is None:
        return None
    return list(match.groups())


def shrink_captures(
    captures: Sequence[str],
    keywords: Sequence[str],
    max_char_width: int = DEFAULT_MAX_CHAR_WIDTH,
) -> str:
    if not captures:
        return ""

    max_length = (max_char_width - VALUE_OVERHEAD * len(captures)) / len(captures)
    wrap_width = max(1, int(max_length))
    parts: list[str] = []

    for keyword, value in zip(keywords, captures):
        truncated = False
        if len(value) > max_length:
            value = _first_wrapped_line(value, wrap_width)
            truncated = True

        value = escape_value(value)
        if not NUMERIC_PATTERN.match(value):
            value = value[1:-1]
        if truncated:
            value += TRUNCATION_MARKER

        parts.append(f"{keyword} {value}")

    return " ".join(parts).strip()


def _first_wrapped_line(value: str, width: int) -> str:
    wrapper = textwrap.TextWrapper(
        width=width,
        expand_tabs=False,
        replace_whitespace=False,
        drop_whitespace=False,
        break_on_hyphens=False,
        break_long_words=True,
    )
    lines = wrapper.wrap(value)
    if not lines:
        return ""
    first, newline, _ = lines[0].partition("\n")
    # A break at a space consumes that space.
    if not newline and len(lines) > 1 and first.endswith(" "):
        first = first[:-1]
    return first


def minify_query(query: str, max_char_width: int = DEFAULT_MAX_CHAR_WIDTH) -> str:
    return minify_statement(query, max_char_width)[0]


def minify_statement(
    query: str, max_char_width: int = DEFAULT_MAX_CHAR_WIDTH
) -> tuple[str, StatementFamily | None]:
    """Minify ``query`` and also return the family it was classified as."""
    summary = summarize_sql(query)
    logger.info(
        "minify_query: sql_len=%s sql_hash=%s max_char_width=%s",
        summary["len"],
        summary["sha256_8"],
        max_char_width,
    )

    family = classify_statement(query)
    if family is None:
        logger.debug("minify_query: unclassified statement sql_hash=%s", summary["sha256_8"])
        return query[:max_char_width], None

    return _compose_mini_query(query, family, max_char_width), family


def _compose_mini_query(query: str, family: StatementFamily, max_char_width: int) -> str:
    mandatory = family.mandatory
    optional = family.optional

    for count in range(len(optional), 0, -1):
        for combination in keyword_combinations(optional, count):
            keywords = mandatory + combination
            captures = match_keywords(query, keywords)
            if captures is not None:
                return shrink_captures(captures, keywords, max_char_width)

    captures = match_keywords(query, mandatory, mandatory_only=True)
    if captures is not None:
        return shrink_captures(captures, mandatory, max_char_width)

    logger.info(
        "minify_query: no keyword pattern matched family=%s sql_hash=%s",
        family.name,
        summarize_sql(query)["sha256_8"],
    )
    return query[:max_char_width]
