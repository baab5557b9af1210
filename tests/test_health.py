# [파일 설명]
# - 목적: 애플리케이션의 헬스 체크 라우트를 검증한다.
# - 제공 기능: app.main에 등록된 /health 응답을 확인한다.
# - 입력/출력: 고정 입력을 사용하며 테스트 통과 여부로 결과를 확인한다.
# - 주의 사항: 원문 SQL이나 비밀 값은 로그/출력에 포함하지 않는다.
# - 연관 모듈: app.main과 연동된다.
from fastapi.testclient import TestClient

from app.main import app


def test_health_returns_ok() -> None:
    client = TestClient(app)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_health_is_served_by_main_app() -> None:
    paths = {route.path for route in app.routes}

    assert {"/health", "/mcp", "/mcp/query/minify"} <= paths
