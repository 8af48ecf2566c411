from dressgenius.routers.preferences import sanitize_preferences


def test_preferences_start_empty(client, user_headers):
    res = client.get("/ai-preferences", headers=user_headers)

    assert res.status_code == 200
    assert res.json() == {"preferences": None}


def test_put_preferences_sanitizes_values(client, user_headers):
    res = client.put(
        "/ai-preferences",
        json={"preferences": {
            "tone": 55.9,
            "strictness": 150,
            "detail": -20,
            "creativity": "80",
            "trendiness": True,
            "comfort": 0,
            "unknown": 50,
        }},
        headers=user_headers,
    )

    assert res.status_code == 200
    assert res.json() == {"preferences": {"tone": 55, "strictness": 100, "detail": 0, "comfort": 0}}
    assert client.get("/ai-preferences", headers=user_headers).json()["preferences"]["tone"] == 55


def test_sanitize_keeps_only_known_numeric_keys():
    cleaned = sanitize_preferences({"weather": 101, "budget": 42, "tone": None, "extra": 3})
    assert cleaned == {"weather": 100, "budget": 42}

    cleaned = sanitize_preferences({"tone": "50", "detail": "150", "comfort": "12.9", "budget": "cheap", "weather": True})
    assert cleaned == {"tone": 50, "detail": 100, "comfort": 12}
