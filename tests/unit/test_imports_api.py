import json


TIKTOK_URL = "https://www.tiktok.com/@cook/video/9"
CAPTION = (
    "Garlic Butter Shrimp Pasta recipe Ingredients: 1 lb shrimp, 3 tbsp butter, 8 oz pasta "
    "Steps: 1) Melt butter 2) Add garlic 3) Toss pasta"
)
SIGI_PAGE = (
    '<html><body><script id="SIGI_STATE" type="application/json">'
    + json.dumps({"ItemModule": {"9": {"desc": CAPTION}}})
    + "</script></body></html>"
)


def test_import_returns_extracted_recipe(client, api_store):
    response = client.post("/api/v1/imports", json={"url": TIKTOK_URL, "html": SIGI_PAGE})

    assert response.status_code == 200
    body = response.json()
    assert body["site_type"] == "tiktok"
    assert body["parser_version"] == "v1"
    assert body["strategies_tried"] == ["embedded-state"]
    assert body["result"]["success"] is True
    assert body["result"]["title"] == "Garlic Butter Shrimp Pasta"
    assert body["result"]["ingredients"] == ["1 lb shrimp", "3 tbsp butter", "8 oz pasta"]
    assert body["result"]["confidence"] == "high"


def test_failed_import_is_not_an_http_error(client):
    response = client.post("/api/v1/imports", json={"url": "https://example.com/nothing"})

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["success"] is False
    assert result["error"] == "All extraction strategies failed"
    assert result["confidence"] == "low"


def test_import_validates_url(client):
    response = client.post("/api/v1/imports", json={"url": "x"})
    assert response.status_code == 422


def test_site_type_endpoint(client):
    response = client.get("/api/v1/imports/site-type", params={"url": "https://www.foodnetwork.com/recipes/x"})

    assert response.status_code == 200
    assert response.json() == {
        "url": "https://www.foodnetwork.com/recipes/x",
        "site_type": "recipe-site",
        "parser_version": "v1",
        "strategies": ["structured-data", "meta-tags"],
    }


def test_site_type_endpoint_uses_discovered_hosts(client, api_store):
    api_store.record_discovered_site("grandmas-kitchen.net", "jsonld")
    response = client.get("/api/v1/imports/site-type", params={"url": "https://grandmas-kitchen.net/pie"})
    assert response.json()["site_type"] == "recipe-site"
