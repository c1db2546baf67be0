"""
Tests for the recipe API.

Background scrapes run on the TestClient's event loop; tests drain the
job runner through the client's portal before checking the outcome.
"""

import pytest
from fastapi.testclient import TestClient

from mise.db.recipes import DuplicateSourceUrlError, InMemoryRecipeStore, get_recipe_store
from mise.models.entities import ScrapeStatus
from mise.recipe_import import FetchError, ScrapedRecipe
from mise.web import jobs, recipe_routes
from mise.web.app import app
from mise.web.jobs import get_scrape_runner

URL = "https://food.test/soup"


def scraped(**overrides) -> ScrapedRecipe:
    fields = {
        "title": "Scraped Soup",
        "source_host": "food.test",
        "servings": 4,
        "servings_text": "4 servings",
        "ingredients": ["2 cups stock", "1 onion"],
        "instructions": ["1. Chop.", "2. Simmer."],
    }
    fields.update(overrides)
    return ScrapedRecipe(**fields)


def fake_extract(result):
    async def extract(url, client=None):
        if isinstance(result, Exception):
            raise result
        return result

    return extract


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setattr(jobs, "_runner", None)
    monkeypatch.setattr(jobs, "extract_recipe", fake_extract(scraped()))
    app.dependency_overrides[get_recipe_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def drain(client: TestClient) -> None:
    client.portal.call(get_scrape_runner().drain)


def create(client: TestClient, url: str = URL, **body):
    return client.post("/api/recipes", json={"source_url": url, **body})


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCreateRecipe:
    def test_create_starts_pending_then_ok(self, client):
        response = create(client)
        assert response.status_code == 201
        recipe_id = response.json()["id"]
        assert response.json()["already_exists"] is False

        drain(client)

        recipe = client.get(f"/api/recipes/{recipe_id}").json()["recipe"]
        assert recipe["scrape_status"] == "ok"
        assert recipe["title"] == "Scraped Soup"
        assert recipe["owner_id"] == "test-user"
        assert recipe["source_host"] == "food.test"

    def test_supplied_title_kept(self, client):
        recipe_id = create(client, title="  My Soup ").json()["id"]
        drain(client)
        assert client.get(f"/api/recipes/{recipe_id}").json()["recipe"]["title"] == "My Soup"

    def test_duplicate_returns_existing(self, client):
        first = create(client).json()["id"]
        drain(client)

        response = create(client, url=f"  {URL} ")
        assert response.status_code == 200
        assert response.json() == {"id": first, "already_exists": True}

    def test_concurrent_duplicate_returns_winner(self, client, store):
        winner = client.portal.call(
            store.create_recipe, "test-user", {"title": "Soup", "source_url": URL, "source_host": "food.test"}
        )

        class RacingStore(InMemoryRecipeStore):
            async def find_by_source_url(self, owner_id, source_url):
                return None

            async def create_recipe(self, owner_id, data):
                raise DuplicateSourceUrlError(data["source_url"], winner.id)

        app.dependency_overrides[get_recipe_store] = RacingStore
        response = create(client)

        assert response.status_code == 200
        assert response.json() == {"id": winner.id, "already_exists": True}

    def test_invalid_url(self, client):
        response = create(client, url="ftp://food.test/soup")
        assert response.status_code == 400
        assert "http" in response.json()["detail"]

    def test_failed_scrape_is_recorded(self, client, monkeypatch):
        monkeypatch.setattr(jobs, "extract_recipe", fake_extract(FetchError("Fetch failed (403)", status_code=403)))

        recipe_id = create(client).json()["id"]
        drain(client)

        recipe = client.get(f"/api/recipes/{recipe_id}").json()["recipe"]
        assert recipe["scrape_status"] == "error"
        assert recipe["scrape_error"] == "Fetch failed (403)"
        assert recipe["title"] == "food.test"


class TestReadRecipes:
    def test_list(self, client):
        create(client, url="https://food.test/a")
        create(client, url="https://food.test/b")
        drain(client)

        recipes = client.get("/api/recipes").json()["recipes"]
        assert {r["source_url"] for r in recipes} == {"https://food.test/a", "https://food.test/b"}
        assert "ingredients" not in recipes[0]

    def test_get_missing(self, client):
        assert client.get("/api/recipes/999").status_code == 404

    def test_other_owner_not_visible(self, client, store):
        recipe = client.portal.call(
            store.create_recipe,
            "someone-else",
            {"title": "Theirs", "source_url": URL, "source_host": "food.test"},
        )
        assert client.get(f"/api/recipes/{recipe.id}").status_code == 404
        assert client.get("/api/recipes").json()["recipes"] == []

    def test_view_scaled(self, client):
        recipe_id = create(client).json()["id"]
        drain(client)

        view = client.get(f"/api/recipes/{recipe_id}/view", params={"multiplier": 2, "checked": [1]}).json()
        assert view["multiplier"] == 2
        assert view["servings_label"] == "Serves 8"
        assert [line["text"] for line in view["ingredients"]] == ["4 cups stock", "2 onion"]
        assert [line["checked"] for line in view["ingredients"]] == [False, True]
        assert view["instructions"] == ["Chop.", "Simmer."]

    def test_view_clamps_multiplier(self, client):
        recipe_id = create(client).json()["id"]
        drain(client)
        view = client.get(f"/api/recipes/{recipe_id}/view", params={"multiplier": 100}).json()
        assert view["multiplier"] == 10


class TestUpdateRecipe:
    def test_update_fields(self, client):
        recipe_id = create(client).json()["id"]
        drain(client)

        response = client.put(
            f"/api/recipes/{recipe_id}",
            json={"title": " Better Soup ", "notes": " add lemon ", "tags": [" soup ", "winter"]},
        )
        assert response.status_code == 200
        recipe = response.json()["recipe"]
        assert recipe["title"] == "Better Soup"
        assert recipe["notes"] == "add lemon"
        assert recipe["tags"] == ["soup", "winter"]

    def test_null_clears_notes(self, client):
        recipe_id = create(client).json()["id"]
        drain(client)
        client.put(f"/api/recipes/{recipe_id}", json={"notes": "hi"})

        recipe = client.put(f"/api/recipes/{recipe_id}", json={"notes": None}).json()["recipe"]
        assert recipe["notes"] is None
        assert recipe["title"] == "Scraped Soup"

    def test_bad_tag(self, client):
        recipe_id = create(client).json()["id"]
        drain(client)
        response = client.put(f"/api/recipes/{recipe_id}", json={"tags": ["x" * 33]})
        assert response.status_code == 422

    def test_blank_tag(self, client):
        recipe_id = create(client).json()["id"]
        drain(client)
        response = client.put(f"/api/recipes/{recipe_id}", json={"tags": ["soup", "   "]})
        assert response.status_code == 422

    def test_too_many_tags(self, client):
        recipe_id = create(client).json()["id"]
        drain(client)
        response = client.put(f"/api/recipes/{recipe_id}", json={"tags": [f"t{i}" for i in range(26)]})
        assert response.status_code == 422

    def test_update_missing(self, client):
        assert client.put("/api/recipes/999", json={"notes": "x"}).status_code == 404


class TestDeleteRecipe:
    def test_delete(self, client):
        recipe_id = create(client).json()["id"]
        drain(client)

        assert client.delete(f"/api/recipes/{recipe_id}").json() == {"ok": True}
        assert client.get(f"/api/recipes/{recipe_id}").status_code == 404
        assert client.delete(f"/api/recipes/{recipe_id}").status_code == 404


class TestRescrape:
    def test_rescrape_recovers_from_error(self, client, monkeypatch):
        monkeypatch.setattr(jobs, "extract_recipe", fake_extract(FetchError("Fetch failed (503)")))
        recipe_id = create(client).json()["id"]
        drain(client)

        monkeypatch.setattr(jobs, "extract_recipe", fake_extract(scraped(title="Fresh Soup")))
        response = client.post(f"/api/recipes/{recipe_id}/rescrape")

        assert response.status_code == 200
        recipe = response.json()["recipe"]
        assert recipe["scrape_status"] == ScrapeStatus.OK.value
        assert recipe["scrape_error"] is None
        assert recipe["title"] == "Fresh Soup"

    def test_rescrape_failure_still_200(self, client, monkeypatch):
        recipe_id = create(client).json()["id"]
        drain(client)

        monkeypatch.setattr(jobs, "extract_recipe", fake_extract(FetchError("Fetch failed (timed out)")))
        response = client.post(f"/api/recipes/{recipe_id}/rescrape")

        assert response.status_code == 200
        recipe = response.json()["recipe"]
        assert recipe["scrape_status"] == "error"
        assert recipe["ingredients"] == ["2 cups stock", "1 onion"]

    def test_rescrape_missing(self, client):
        assert client.post("/api/recipes/999/rescrape").status_code == 404


class TestPreview:
    def test_preview(self, client, monkeypatch):
        monkeypatch.setattr(recipe_routes, "extract_recipe", fake_extract(scraped()))

        response = client.post("/api/recipes/import/preview", json={"url": URL})
        assert response.status_code == 200
        assert response.json()["title"] == "Scraped Soup"
        assert client.get("/api/recipes").json()["recipes"] == []

    def test_preview_fetch_error(self, client, monkeypatch):
        monkeypatch.setattr(recipe_routes, "extract_recipe", fake_extract(FetchError("Fetch failed (404)")))
        response = client.post("/api/recipes/import/preview", json={"url": URL})
        assert response.status_code == 502
        assert response.json()["detail"] == "Fetch failed (404)"

    def test_preview_invalid_url(self, client):
        response = client.post("/api/recipes/import/preview", json={"url": "nope"})
        assert response.status_code == 400
