# tests/routers/test_preferences_api.py
"""API layer tests for preferences."""


def test_get_empty(api):
    response = api.client.get("/preferences")
    assert response.status_code == 200
    assert response.json() == {"preferences": {}}


def test_put_merges(api):
    api.client.put("/preferences", json={"preferences": {"theme": "dark", "date_format": "DD/MM"}})

    response = api.client.put("/preferences", json={"preferences": {"theme": "light"}})

    assert response.json() == {"preferences": {"theme": "light", "date_format": "DD/MM"}}
    assert api.store.load()["preferences"]["theme"] == "light"
