import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.deps import get_completion_client, get_db, get_nutrition_client
from app.core.errors import UpstreamUnavailable
from app.main import app
from app.services.nutrition import NutritionClient

from conftest import FakeCompletionClient

USER = {"X-User-Id": "user-1"}
OTHER = {"X-User-Id": "user-2"}

RECIPE = {
    "title": "Pancake",
    "description": "Fluffy",
    "ingredients": ["egg", "flour"],
    "instructions": "mix and fry",
}


class FailingCompletionClient:
    async def complete(self, prompt: str) -> str:
        raise UpstreamUnavailable("Failed to generate response")


@pytest.fixture
def completion():
    return FakeCompletionClient(
        'Here: [{"title":"Pancake","description":"d","ingredients":["egg"],"instructions":"mix"}] done'
    )


@pytest.fixture
def nutrition_calls():
    return []


@pytest.fixture
def client(fake_db, completion, settings, nutrition_calls):
    def handler(request: httpx.Request) -> httpx.Response:
        nutrition_calls.append(request)
        return httpx.Response(
            200,
            json={"nutrition": {"nutrients": [
                {"name": "Calories", "amount": 300},
                {"name": "Cholesterol", "amount": 120},
            ]}},
        )

    nutrition = NutritionClient(
        settings,
        http=httpx.AsyncClient(base_url="https://nutrition.test", transport=httpx.MockTransport(handler)),
    )
    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_completion_client] = lambda: completion
    app.dependency_overrides[get_nutrition_client] = lambda: nutrition
    # startup 이벤트(실제 Mongo 연결)는 돌리지 않는다
    yield TestClient(app)
    app.dependency_overrides.clear()


def _save(client, headers=USER, **overrides):
    r = client.post("/save-recipe", json=dict(RECIPE, **overrides), headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["recipe"]


class TestGenerate:
    def test_generate(self, client, completion) -> None:
        r = client.post("/generate-recipes", json={"ingredients": ["egg", "flour"], "preferences": ["vegan"]})
        assert r.status_code == 200
        assert [x["title"] for x in r.json()["recipes"]] == ["Pancake"]
        assert "vegan" in completion.prompts[0]

    @pytest.mark.parametrize(
        "body",
        [
            {"ingredients": ["egg", 1], "preferences": []},
            {"ingredients": "egg", "preferences": []},
            {"ingredients": ["egg"]},
            {"ingredients": ["egg"], "preferences": [None]},
        ],
    )
    def test_invalid_input(self, client, completion, body) -> None:
        r = client.post("/generate-recipes", json=body)
        assert r.status_code == 400
        assert "error" in r.json()
        assert completion.prompts == []

    def test_no_json(self, client, completion) -> None:
        completion.text = "I cannot help with that."
        r = client.post("/generate-recipes", json={"ingredients": [], "preferences": []})
        assert r.status_code == 502
        assert r.json() == {"error": "No JSON array found in the response"}

    def test_upstream_failure(self, client) -> None:
        app.dependency_overrides[get_completion_client] = lambda: FailingCompletionClient()
        r = client.post("/generate-recipes", json={"ingredients": ["egg"], "preferences": []})
        assert r.status_code == 502
        assert r.json() == {"error": "Failed to generate response"}


class TestSavedRecipes:
    def test_save_and_list(self, client) -> None:
        rec = _save(client)
        assert rec["ownerId"] == "user-1"
        assert rec["favourite"] is False

        r = client.get("/saved-recipes", headers=USER)
        assert [x["id"] for x in r.json()["recipes"]] == [rec["id"]]
        assert client.get("/saved-recipes", headers=OTHER).json() == {"recipes": []}

    def test_save_missing_fields(self, client) -> None:
        r = client.post("/save-recipe", json=dict(RECIPE, ingredients=[]), headers=USER)
        assert r.status_code == 400
        assert r.json()["error"].startswith("Missing required fields")

    def test_owner_cannot_be_spoofed_in_body(self, client) -> None:
        rec = _save(client, ownerId="user-2", owner_id="user-2")
        assert rec["ownerId"] == "user-1"

    def test_patch_favourite(self, client) -> None:
        rec = _save(client)
        r = client.patch(f"/saved-recipes/{rec['id']}", json={"favourite": True}, headers=USER)
        assert r.status_code == 200
        updated = r.json()["recipe"]
        assert updated["favourite"] is True
        assert {k: v for k, v in updated.items() if k != "favourite"} == {
            k: v for k, v in rec.items() if k != "favourite"
        }

        favs = client.get("/saved-recipes", params={"favourite": "true"}, headers=USER).json()
        assert [x["id"] for x in favs["recipes"]] == [rec["id"]]

    def test_patch_rejects_blank_title(self, client) -> None:
        rec = _save(client)
        r = client.patch(f"/saved-recipes/{rec['id']}", json={"title": "  "}, headers=USER)
        assert r.status_code == 400

    def test_other_owner_gets_404(self, client) -> None:
        rec = _save(client)
        url = f"/saved-recipes/{rec['id']}"
        assert client.get(url, headers=OTHER).status_code == 404
        assert client.delete(url, headers=OTHER).status_code == 404
        assert client.patch(url, json={"favourite": True}, headers=OTHER).status_code == 404
        assert client.get(url, headers=USER).status_code == 200

    def test_delete(self, client) -> None:
        rec = _save(client)
        url = f"/saved-recipes/{rec['id']}"
        assert client.delete(url, headers=USER).json() == {"message": "Recipe deleted"}
        assert client.get(url, headers=USER).json() == {"error": "Recipe not found"}

    def test_anonymous_cookie_issued(self, client) -> None:
        r = client.post("/save-recipe", json=RECIPE)
        assert r.status_code == 201
        assert r.cookies.get("anon_id") == r.json()["recipe"]["ownerId"]

    def test_nutrition_enrichment(self, client, nutrition_calls) -> None:
        rec = _save(client)
        url = f"/saved-recipes/{rec['id']}/nutrition"

        first = client.post(url, headers=USER)
        assert first.status_code == 200
        assert first.json()["recipe"]["nutrition"] == {
            "calories": 300.0, "protein": 0.0, "carbs": 0.0, "fats": 0.0, "cholesterol": 120.0,
        }
        second = client.post(url, headers=USER)
        assert second.json() == first.json()
        assert len(nutrition_calls) == 1

    def test_created_at_stable_after_save(self, client) -> None:
        rec = _save(client)
        got = client.get(f"/saved-recipes/{rec['id']}", headers=USER).json()["recipe"]
        assert got["createdAt"] == rec["createdAt"]

    @pytest.mark.parametrize("query", ["Gluten Free", "gluten-free", "GlutenFree"])
    def test_tag_filter_matches_saved_form(self, client, query) -> None:
        rec = _save(client, tags=["Gluten Free"])
        _save(client, title="Plain")
        r = client.get("/saved-recipes", params={"tag": query}, headers=USER)
        assert [x["id"] for x in r.json()["recipes"]] == [rec["id"]]


class BrokenDB:
    async def command(self, name):
        raise RuntimeError("connection refused at mongo-internal:27017")


def test_health_hides_db_error(client) -> None:
    app.state.db = BrokenDB()
    try:
        r = client.get("/health")
    finally:
        del app.state.db
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "db": "error"}
