# [파일 설명]
# - 목적: 바인딩 파라미터 값을 SQL 리터럴 문자열로 변환한다.
# - 제공 기능: NULL/불리언/문자열/바이너리/시퀀스/래퍼/객체/숫자 값의 이스케이프를 제공한다.
# - 입력/출력: 임의의 파이썬 값을 입력으로 받아 리터럴 문자열을 반환한다.
# - 주의 사항: 표시용 근사치이며 실행용 SQL 이스케이프로 사용하지 않는다.
# - 연관 모듈: sql_minifier(값 축약)와 sql_parameters(플레이스홀더 치환)에서 공유한다.
from __future__ import annotations

import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

SLASHED_CHARACTERS = {
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "\x00": "\\0",
}

BINARY_TYPES = (bytes, bytearray, memoryview)


@dataclass(frozen=True)
class BoundParameter:
    """ORM-style bound parameter that carries the real value inside."""

    name: str
    value: Any


def add_slashes(text: str) -> str:
    return "".join(SLASHED_CHARACTERS.get(char, char) for char in text)


def escape_value(value: Any) -> str:
    """Render ``value`` as the literal it would appear as in a SQL statement.

    Strings are quoted, numbers are not, ``None`` becomes ``NULL`` and booleans
    become ``1``/``0``. Byte strings that are not valid UTF-8 are written as a
    ``0x`` hex literal. Sequences are flattened into a comma separated list
    without brackets. Escaping is applied once per call: escaping an already
    escaped string quotes it again.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, BINARY_TYPES):
        raw = bytes(value)
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            return "0x" + raw.hex().upper()
        return _quote(text)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, Mapping):
        return ", ".join(escape_value(item) for item in value.values())
    if isinstance(value, (list, tuple)):
        return ", ".join(escape_value(item) for item in value)
    if isinstance(value, BoundParameter):
        return _quote(_bound_text(value.value))
    if isinstance(value, numbers.Number):
        return str(value)
    return add_slashes(str(value))


def _quote(text: str) -> str:
    return "'" + add_slashes(text) + "'"


# NULL and false render as empty text, true as "1".
def _bound_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, BINARY_TYPES):
        return bytes(value).decode("utf-8", "replace")
    return str(value)
