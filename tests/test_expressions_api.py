from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api import router as api_router
from app.config import Settings
from app.main import create_app
from app.observability import metrics


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app(Settings(_env_file=None, default_language="ru")))


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "expression-service"}


def test_compile_cucumber_expression(client: TestClient) -> None:
    response = client.post(
        "/api/v1/expressions/compile",
        json={"expression": "I have {int} cucumber(s) in my belly/stomach"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["regex"] == r"^I have ((?:-?\d+)|(?:\d+)) cucumber(?:s)? in my (?:belly|stomach)$"
    assert payload["expressionType"] == "cucumberExpression"
    assert payload["parameterTypes"] == ["int"]


def test_compile_regular_expression(client: TestClient) -> None:
    response = client.post("/api/v1/expressions/compile", json={"expression": r"^I have (\d+) cukes$"})

    assert response.status_code == 200
    assert response.json()["expressionType"] == "regularExpression"
    assert response.json()["parameterTypes"] == []


def test_compile_grammar_error(client: TestClient) -> None:
    response = client.post("/api/v1/expressions/compile", json={"expression": "three (brown)/black mice"})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["kind"] == "alternativeMayNotExclusivelyContainOptionals"
    assert detail["expression"] == "three (brown)/black mice"


def test_compile_undefined_parameter_type(client: TestClient) -> None:
    response = client.post("/api/v1/expressions/compile", json={"expression": "I like {color}"})

    assert response.status_code == 422
    assert response.json()["detail"]["kind"] == "UndefinedParameterTypeError"


def test_compile_syntax_error(client: TestClient) -> None:
    response = client.post("/api/v1/expressions/compile", json={"expression": "{int"})

    assert response.status_code == 422
    assert response.json()["detail"]["kind"] == "ExpressionSyntaxError"


def test_match_anonymous_parameter_with_type_hint(client: TestClient) -> None:
    response = client.post(
        "/api/v1/expressions/match",
        json={"expression": "I have {} cukes", "text": "I have 5 cukes", "typeHints": ["int"]},
    )

    assert response.status_code == 200
    assert response.json() == {
        "matched": True,
        "arguments": [
            {"parameterType": "anonymous", "value": 5, "group": {"value": "5", "start": 7, "end": 8}}
        ],
    }


def test_match_without_match(client: TestClient) -> None:
    response = client.post(
        "/api/v1/expressions/match",
        json={"expression": "I have {int} cukes", "text": "I have no cukes"},
    )

    assert response.status_code == 200
    assert response.json() == {"matched": False, "arguments": []}


def test_match_transform_error_is_bad_request(client: TestClient) -> None:
    response = client.post(
        "/api/v1/expressions/match",
        json={"expression": "{int}", "text": "99999999999"},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "ParameterTransformError"


def test_match_rejects_unknown_type_hint(client: TestClient) -> None:
    response = client.post(
        "/api/v1/expressions/match",
        json={"expression": "{}", "text": "x", "typeHints": ["list"]},
    )

    assert response.status_code == 422


def test_list_parameter_types(client: TestClient) -> None:
    response = client.get("/api/v1/parameter-types")

    assert response.status_code == 200
    by_name = {item["name"]: item for item in response.json()}
    assert by_name["int"]["preferForRegexpMatch"] is True
    assert by_name["int"]["type"] == "int"
    assert by_name[""]["type"] is None
    assert by_name["word"]["useForSnippets"] is False


def test_match_steps(client: TestClient) -> None:
    response = client.post(
        "/api/v1/steps/match",
        json={
            "steps": [
                {"order": 1, "text": "пользователь вводит 42"},
                {"order": 2, "text": "Open the cart"},
            ],
            "stepDefinitions": [
                {"id": "input", "keyword": "When", "pattern": "пользователь вводит {int}"},
            ],
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["unmatchedCount"] == 1
    first, second = payload["items"]
    assert first["status"] == "exact"
    assert first["stepDefinitionId"] == "input"
    assert first["arguments"] == [42]
    assert first["generatedGherkinLine"] == "Когда пользователь вводит 42"
    assert second["status"] == "unmatched"
    assert second["notes"]["reason"] == "no_definition_found"


def test_metrics_count_compilations(client: TestClient) -> None:
    metrics.reset()
    client.post("/api/v1/expressions/compile", json={"expression": "metrics {word}"})
    client.post("/api/v1/expressions/compile", json={"expression": "metrics {word}"})

    snapshot = client.get("/metrics").json()

    assert snapshot["expression.cache.miss"] == 1
    assert snapshot["expression.cache.hit"] == 1
    assert snapshot["trace.expression.compile.count"] == 1


def test_routes_without_initialized_state() -> None:
    app = FastAPI()
    app.include_router(api_router)
    client = TestClient(app)

    assert client.get("/parameter-types").status_code == 503
    assert client.post("/expressions/compile", json={"expression": "a"}).status_code == 503
