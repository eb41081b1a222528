from travel_planner.repositories.add_friend_logs import list_add_friend_logs


def test_search_list_requires_login(client):
    assert client.get("/api/profiles/search-list?q=al").status_code == 401


def test_search_list_short_query_is_empty_and_not_logged(client, make_user, login):
    user = make_user()
    login(user)
    assert client.get("/api/profiles/search-list?q=%20a%20").get_json() == {"data": []}
    assert list_add_friend_logs(user.id) == []


def test_search_list_by_name_prefix(client, make_user, login):
    searcher = make_user("searcher")
    make_user("marta", full_name="Marta Silva")
    make_user("martin")
    make_user("omar")
    login(searcher)

    response = client.get("/api/profiles/search-list?q=Mart")
    names = sorted(row["name"] for row in response.get_json()["data"])
    assert names == ["marta", "martin"]
    assert set(response.get_json()["data"][0]) == {"id", "public_id", "name", "avatar_url"}
    assert [entry.search_query for entry in list_add_friend_logs(searcher.id)] == ["Mart"]


def test_search_list_by_public_id_prefix(client, make_user, login):
    searcher = make_user("searcher")
    target = make_user("target")
    login(searcher)

    prefix = target.profile.public_id[:6]
    rows = client.get(f"/api/profiles/search-list?q={prefix}").get_json()["data"]
    assert target.id in [row["id"] for row in rows]
    assert all(row["public_id"].startswith(prefix) for row in rows)


def test_search_list_limit_is_clamped(client, make_user, login):
    searcher = make_user("searcher")
    for index in range(25):
        make_user(f"zed{index:02d}")
    login(searcher)

    assert len(client.get("/api/profiles/search-list?q=zed&limit=100").get_json()["data"]) == 20
    assert len(client.get("/api/profiles/search-list?q=zed").get_json()["data"]) == 10
    assert len(client.get("/api/profiles/search-list?q=zed&limit=3").get_json()["data"]) == 3


def test_profile_search_matches_substrings(client, make_user):
    make_user("hannah", full_name="Hannah Arendt")
    make_user("anna")
    make_user("bob")

    assert client.get("/api/profiles/search?q=%20").status_code == 400
    rows = client.get("/api/profiles/search?q=ann").get_json()["data"]
    assert sorted(row["username"] for row in rows) == ["anna", "hannah"]


def test_slug_route(client, make_user):
    user = make_user("traveller")
    public_id = user.profile.public_id

    response = client.get(f"/api/u/{public_id}")
    assert response.status_code == 200
    assert response.get_json()["profile"]["id"] == user.id

    assert client.get("/api/u/00000000").status_code == 404

    gone = client.get("/api/u/traveller")
    assert gone.status_code == 410
    assert gone.get_json() == {"error": "Slug route removed"}


def test_search_list_tolerates_non_finite_limits(client, make_user, login):
    searcher = make_user("searcher")
    for index in range(25):
        make_user(f"zed{index:02d}")
    login(searcher)

    huge = client.get("/api/profiles/search-list?q=zed&limit=1e999")
    assert huge.status_code == 200
    assert len(huge.get_json()["data"]) == 20

    assert len(client.get("/api/profiles/search-list?q=zed&limit=-inf").get_json()["data"]) == 1
    assert len(client.get("/api/profiles/search-list?q=zed&limit=nan").get_json()["data"]) == 10
