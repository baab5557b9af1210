# [파일 설명]
# - 목적: SQL 요약 정보를 계산해 안전한 로그 출력에 활용한다.
# - 제공 기능: 길이/해시 요약 데이터를 생성한다.
# - 입력/출력: 원문 SQL을 입력으로 받아 요약 dict를 반환한다.
# - 주의 사항: 원문 SQL 자체는 반환하거나 로그에 남기지 않는다.
# - 연관 모듈: 쿼리 축약/치환/포맷 서비스(app.services.*)에서 로그 요약에 사용된다.
from __future__ import annotations

import hashlib


# [함수 설명]
# - 목적: 로그에 남길 SQL 요약(길이, sha256 앞 8자리)을 계산한다.
# - 입력: sql: str
# - 출력: len/sha256_8 키를 가진 dict를 반환한다.
# - 에러 처리: 인코딩 불가 문자는 대체 문자로 처리해 예외를 내지 않는다.
# - 결정론: 동일 입력에 대해 항상 동일한 요약을 반환한다.
# - 보안: 원문 SQL은 결과에 포함하지 않는다.
def summarize_sql(sql: str) -> dict[str, int | str]:
    sql_hash = hashlib.sha256(sql.encode("utf-8", "replace")).hexdigest()[:8]
    return {"len": len(sql), "sha256_8": sql_hash}
