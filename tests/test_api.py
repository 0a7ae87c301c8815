"""Tests for the HTTP service."""

import re
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from sclscore import __version__
from sclscore.api import create_app
from sclscore.config import Settings
from sclscore.gate import MemoryCredentialStore
from sclscore.registry import InventorySpec
from sclscore.scoring import KnowledgeBase, ScoringEngine

CODE_PATTERN = re.compile(r"New redemption code generated: ([0-9A-F]{6})")


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def client(store: MemoryCredentialStore, engine: ScoringEngine) -> Iterator[TestClient]:
    app = create_app(Settings(), store=store, engine=engine)
    with TestClient(app) as test_client:
        yield test_client


def generate_code(client: TestClient) -> str:
    response = client.get("/api/generate-code")
    assert response.status_code == 200
    match = CODE_PATTERN.search(response.text)
    assert match is not None
    return match.group(1)


def obtain_token(client: TestClient) -> str:
    response = client.post("/api/validate-code", json={"code": generate_code(client)})
    assert response.status_code == 200
    return response.json()["tempToken"]


def submit(client: TestClient, token: str | None, headers: dict | None = None, **kwargs):
    headers = dict(headers or {})
    if token:
        headers["x-auth-token"] = token
    return client.post("/api/submit", headers=headers, **kwargs)


class TestCredentialEndpoints:
    """Tests for code generation and redemption."""

    def test_generate_code_html(self, client: TestClient) -> None:
        response = client.get("/api/generate-code")

        assert response.headers["content-type"].startswith("text/html")
        assert response.text.startswith("<h1>New redemption code generated: ")

    def test_validate_code(self, client: TestClient) -> None:
        response = client.post("/api/validate-code", json={"code": generate_code(client)})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["tempToken"]

    def test_code_normalized(self, client: TestClient) -> None:
        code = generate_code(client)
        response = client.post("/api/validate-code", json={"code": f"  {code.lower()} "})

        assert response.status_code == 200

    def test_code_single_use(self, client: TestClient) -> None:
        code = generate_code(client)
        client.post("/api/validate-code", json={"code": code})

        response = client.post("/api/validate-code", json={"code": code})

        assert response.status_code == 404
        assert response.json() == {"error": "Invalid or already used redemption code."}

    def test_unknown_code(self, client: TestClient) -> None:
        response = client.post("/api/validate-code", json={"code": "ZZZZZZ"})
        assert response.status_code == 404

    def test_missing_code(self, client: TestClient) -> None:
        response = client.post("/api/validate-code", json={})
        assert response.status_code == 404

    def test_malformed_body(self, client: TestClient) -> None:
        response = client.post(
            "/api/validate-code",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "The submitted data is malformed."}


class TestSubmit:
    """Tests for the gated scoring endpoint."""

    def test_full_flow(self, client: TestClient, make_answers) -> None:
        token = obtain_token(client)

        response = submit(client, token, json={"answers": make_answers(2)})

        assert response.status_code == 200
        body = response.json()
        assert body["stats"]["totalScore"] == 180
        assert body["stats"]["positiveItemPercentage"] == "100%"
        assert body["overallAssessment"]["level"] == "mild"
        assert len(body["factorDetails"]) == 9
        assert "diagnostics" not in body

    def test_token_reuse_rejected(self, client: TestClient, make_answers) -> None:
        token = obtain_token(client)
        submit(client, token, json={"answers": make_answers(0)})

        response = submit(client, token, json={"answers": make_answers(0)})

        assert response.status_code == 403
        assert response.json() == {"error": "Authorization token is invalid or has expired."}

    def test_missing_token(self, client: TestClient, make_answers) -> None:
        response = submit(client, None, json={"answers": make_answers(0)})

        assert response.status_code == 401
        assert response.json() == {"error": "No authorization token provided."}

    def test_unknown_token(self, client: TestClient, make_answers) -> None:
        response = submit(client, "forged", json={"answers": make_answers(0)})
        assert response.status_code == 403

    def test_wrong_length(self, client: TestClient, make_answers) -> None:
        response = submit(client, obtain_token(client), json={"answers": make_answers(0)[:89]})

        assert response.status_code == 400
        assert "exactly 90" in response.json()["error"]

    def test_missing_answers(self, client: TestClient) -> None:
        response = submit(client, obtain_token(client), json={"responses": []})
        assert response.status_code == 400

    def test_body_not_an_object(self, client: TestClient, make_answers) -> None:
        response = submit(client, obtain_token(client), json=make_answers(0))

        assert response.status_code == 400
        assert response.json() == {"error": "The submitted data is malformed."}

    def test_malformed_body_consumes_token(self, client: TestClient, make_answers) -> None:
        token = obtain_token(client)
        malformed = submit(
            client,
            token,
            content=b"{broken",
            headers={"content-type": "application/json"},
        )
        assert malformed.status_code == 400
        assert malformed.json() == {"error": "The submitted data is malformed."}

        response = submit(client, token, json={"answers": make_answers(0)})

        assert response.status_code == 403

    def test_internal_error(
        self,
        client: TestClient,
        engine: ScoringEngine,
        make_answers,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(engine, "_score_factor", explode)

        response = submit(client, obtain_token(client), json={"answers": make_answers(0)})

        assert response.status_code == 500
        assert response.json() == {
            "error": "An internal error occurred while analysing your results."
        }

    def test_lenient_entries_still_scored(self, client: TestClient, make_answers) -> None:
        answers = make_answers(1, overrides={1: "3", 2: "often"})

        response = submit(client, obtain_token(client), json={"answers": answers})

        assert response.status_code == 200
        assert response.json()["stats"]["totalScore"] == 3 + 0 + 88

    def test_huge_digit_string_score(self, client: TestClient, make_answers) -> None:
        answers = make_answers(1, overrides={1: "9" * 5000})

        response = submit(client, obtain_token(client), json={"answers": answers})

        assert response.status_code == 200
        assert response.json()["stats"]["totalScore"] == 89


class TestMissingKnowledge:
    """Gaps in the knowledge base degrade the text, not the response."""

    @pytest.fixture
    def client(
        self,
        store: MemoryCredentialStore,
        inventory: InventorySpec,
        gappy_knowledge: KnowledgeBase,
    ) -> Iterator[TestClient]:
        engine = ScoringEngine(inventory, gappy_knowledge)
        app = create_app(Settings(), store=store, engine=engine)
        with TestClient(app) as test_client:
            yield test_client

    def test_placeholder_text_with_200(
        self, client: TestClient, gappy_knowledge: KnowledgeBase, make_answers
    ) -> None:
        response = submit(client, obtain_token(client), json={"answers": make_answers(4)})

        assert response.status_code == 200
        explanations = response.json()["detailedExplanations"]
        assert explanations[0]["factorId"] == "somatization"
        assert explanations[0]["symptoms"] == gappy_knowledge.placeholder.symptoms
        assert explanations[1]["symptoms"] != gappy_knowledge.placeholder.symptoms

    def test_levels_with_text_unaffected(
        self, client: TestClient, gappy_knowledge: KnowledgeBase, make_answers
    ) -> None:
        response = submit(client, obtain_token(client), json={"answers": make_answers(0)})

        assert response.status_code == 200
        symptoms = [e["symptoms"] for e in response.json()["detailedExplanations"]]
        assert gappy_knowledge.placeholder.symptoms not in symptoms


class TestWithoutStore:
    """The service starts without a credential store but cannot gate requests."""

    @pytest.fixture
    def client(self, engine: ScoringEngine) -> Iterator[TestClient]:
        app = create_app(Settings(), engine=engine)
        with TestClient(app) as test_client:
            yield test_client

    def test_generate_unavailable(self, client: TestClient) -> None:
        response = client.get("/api/generate-code")

        assert response.status_code == 503
        assert "temporarily unavailable" in response.json()["error"]

    def test_submit_unavailable(self, client: TestClient, make_answers) -> None:
        response = submit(client, "some-token", json={"answers": make_answers(0)})
        assert response.status_code == 503

    def test_missing_token_still_unauthorized(self, client: TestClient, make_answers) -> None:
        response = submit(client, None, json={"answers": make_answers(0)})
        assert response.status_code == 401

    def test_health_reports_no_store(self, client: TestClient) -> None:
        body = client.get("/health").json()
        assert body["store"] is None
        assert body["storeReachable"] is False


class TestServiceMisc:
    """Health and CORS."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "version": __version__,
            "store": "memory",
            "storeReachable": True,
        }

    def test_health_reports_unreachable_store(
        self, client: TestClient, store: MemoryCredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def down() -> bool:
            return False

        monkeypatch.setattr(store, "ping", down)

        body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["storeReachable"] is False

    def test_cors_header(self, client: TestClient) -> None:
        response = client.get("/health", headers={"Origin": "https://example.org"})
        assert response.headers["access-control-allow-origin"] == "*"

    def test_cors_preflight(self, client: TestClient) -> None:
        response = client.options(
            "/api/submit",
            headers={
                "Origin": "https://example.org",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "x-auth-token",
            },
        )
        assert response.status_code == 200
