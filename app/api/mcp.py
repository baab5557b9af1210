# [파일 설명]
# - 목적: 쿼리 표시용 API 라우트를 정의하고 요청/응답 모델을 제공한다.
# - 제공 기능: 쿼리 축약, 파라미터 치환, 값 이스케이프, 하이라이트/포맷 POST 엔드포인트를 제공한다.
# - 입력/출력: Pydantic 모델로 요청을 수신하고 표준화된 응답 구조를 반환한다.
# - 주의 사항: 원문 SQL과 파라미터 값은 로그에 직접 남기지 않는다.
# - 연관 모듈: app.services.sql_* 서비스들과 연결된다.
from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.services.sql_escape import escape_value
from app.services.sql_highlight import format_query
from app.services.sql_minifier import (
    DEFAULT_MAX_CHAR_WIDTH,
    minify_statement,
)
from app.services.sql_parameters import replace_query_parameters

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "0.1"


# [클래스 설명]
# - 역할: MinifyRequest Pydantic 스키마 모델을 정의한다.
# - 사용 위치: /query/minify 요청 본문에서 사용된다.
# - 핵심 동작: max_char_width가 없으면 환경 변수 기본값을 사용한다.
# - 제약/주의: sql은 빈 문자열을 허용하지 않는다.
class MinifyRequest(BaseModel):
    sql: str = Field(..., min_length=1)
    max_char_width: int | None = Field(default=None, ge=1)


class MinifyResponse(BaseModel):
    version: str
    minified: str
    family: str | None
    errors: list[str]


# [클래스 설명]
# - 역할: ReplaceParametersRequest Pydantic 스키마 모델을 정의한다.
# - 사용 위치: /query/replace-parameters 요청 본문에서 사용된다.
# - 핵심 동작: 파라미터는 JSON 배열(위치 기반) 또는 객체(이름/번호 기반)로 받는다.
# - 제약/주의: 숫자 문자열 키는 치환 전에 정수 위치로 변환된다.
class ReplaceParametersRequest(BaseModel):
    sql: str = Field(..., min_length=1)
    parameters: list[Any] | dict[str, Any] = Field(default_factory=list)


class ReplaceParametersResponse(BaseModel):
    version: str
    sql: str
    errors: list[str]


class EscapeRequest(BaseModel):
    value: Any = None


class EscapeResponse(BaseModel):
    version: str
    literal: str


# [클래스 설명]
# - 역할: FormatRequest Pydantic 스키마 모델을 정의한다.
# - 사용 위치: /query/format 요청 본문에서 사용된다.
# - 핵심 동작: highlight_only가 참이면 정렬 없이 하이라이트만 수행한다.
# - 제약/주의: dialect가 없으면 sqlglot 기본 방언을 사용한다.
class FormatRequest(BaseModel):
    sql: str = Field(..., min_length=1)
    highlight_only: bool = False
    dialect: str | None = None


class FormatResponse(BaseModel):
    version: str
    html: str
    errors: list[str]


# [함수 설명]
# - 목적: 환경 변수 기반 기본 표시 폭을 결정한다.
# - 입력: QUERY_MAX_CHAR_WIDTH 환경 변수
# - 출력: 양의 정수 폭
# - 에러 처리: 정수가 아니거나 1 미만이면 기본값(100)을 사용한다.
# - 결정론: 동일 환경 입력에 대해 안정적인 결과를 반환한다.
# - 보안: 환경 값 원문은 로그에 남기지 않는다.
def load_max_char_width() -> int:
    env_value = os.getenv("QUERY_MAX_CHAR_WIDTH", "").strip()
    if not env_value:
        return DEFAULT_MAX_CHAR_WIDTH
    try:
        width = int(env_value)
    except ValueError:
        logger.warning("QUERY_MAX_CHAR_WIDTH is not an integer; using %s", DEFAULT_MAX_CHAR_WIDTH)
        return DEFAULT_MAX_CHAR_WIDTH
    if width < 1:
        logger.warning("QUERY_MAX_CHAR_WIDTH must be positive; using %s", DEFAULT_MAX_CHAR_WIDTH)
        return DEFAULT_MAX_CHAR_WIDTH
    return width


def normalize_parameters(parameters: list[Any] | dict[str, Any]) -> list[Any] | dict[Any, Any]:
    if isinstance(parameters, list):
        return parameters
    return {_normalize_key(key): value for key, value in parameters.items()}


def _normalize_key(key: str) -> int | str:
    if key.isdigit():
        return int(key)
    return key


# [함수 설명]
# - 목적: SQL을 프로파일러 한 줄 요약으로 축약한다.
# - 입력: MinifyRequest(sql, max_char_width)
# - 출력: 축약 문자열과 분류된 문장 유형을 반환한다.
# - 에러 처리: 분류/매칭 실패 시 원문 앞부분 절단으로 대체한다.
# - 결정론: 동일 입력에 대해 항상 동일한 요약을 반환한다.
# - 보안: 원문 SQL은 로그에 남기지 않는다.
@router.post("/query/minify", response_model=MinifyResponse)
def minify(request: MinifyRequest) -> MinifyResponse:
    width = request.max_char_width or load_max_char_width()
    minified, family = minify_statement(request.sql, max_char_width=width)
    return MinifyResponse(
        version=API_VERSION,
        minified=minified,
        family=family.name if family else None,
        errors=[],
    )


# [함수 설명]
# - 목적: 플레이스홀더를 이스케이프된 리터럴 값으로 치환한다.
# - 입력: ReplaceParametersRequest(sql, parameters)
# - 출력: 치환된 SQL 문자열을 반환한다.
# - 에러 처리: 값을 찾지 못한 플레이스홀더는 그대로 남긴다.
# - 결정론: 왼쪽에서 오른쪽 순서로 단일 커서를 진행한다.
# - 보안: 파라미터 값은 로그에 남기지 않는다.
@router.post("/query/replace-parameters", response_model=ReplaceParametersResponse)
def replace_parameters(request: ReplaceParametersRequest) -> ReplaceParametersResponse:
    parameters = normalize_parameters(request.parameters)
    return ReplaceParametersResponse(
        version=API_VERSION,
        sql=replace_query_parameters(request.sql, parameters),
        errors=[],
    )


@router.post("/query/escape", response_model=EscapeResponse)
def escape(request: EscapeRequest) -> EscapeResponse:
    return EscapeResponse(version=API_VERSION, literal=escape_value(request.value))


# [함수 설명]
# - 목적: SQL을 하이라이트하거나 정렬 후 하이라이트한다.
# - 입력: FormatRequest(sql, highlight_only, dialect)
# - 출력: HTML 마크업과 오류 목록을 반환한다.
# - 에러 처리: 파싱/토크나이징 실패는 errors에 기록하고 원문 기반 마크업을 반환한다.
# - 결정론: 동일 입력에 대해 동일한 마크업을 반환한다.
# - 보안: 원문 SQL은 로그에 남기지 않는다.
@router.post("/query/format", response_model=FormatResponse)
def format_sql(request: FormatRequest) -> FormatResponse:
    markup, errors = format_query(
        request.sql, highlight_only=request.highlight_only, dialect=request.dialect
    )
    return FormatResponse(version=API_VERSION, html=markup, errors=errors)
