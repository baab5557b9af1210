# [파일 설명]
# - 목적: FastAPI 애플리케이션을 생성하고 라우터를 조립한다.
# - 제공 기능: /health 엔드포인트와 쿼리 표시 라우터, MCP 엔드포인트 등록을 제공한다.
# - 입력/출력: HTTP 요청에 대해 상태 정보를 반환한다.
# - 주의 사항: 동작 변경 없이 라우팅만 담당한다.
# - 연관 모듈: app.api.mcp 라우터 및 app.mcp_streamable_http 라우터와 연동된다.
from fastapi import FastAPI

from app.api.mcp import router as mcp_router
from app.mcp_streamable_http import router as streamable_http_router

app = FastAPI(title="query-formatter")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(mcp_router, prefix="/mcp")
app.include_router(streamable_http_router)
