import datetime

from fastapi.testclient import TestClient


def at(minute: int) -> datetime.datetime:
    return datetime.datetime(2024, 5, 1, 12, minute, tzinfo=datetime.timezone.utc)


def test_feed_pages(client: TestClient, alice, bob, make_friends, make_post, login, monkeypatch):
    import settings

    monkeypatch.setattr(settings, "FEED_PAGE_SIZE", 2)
    make_friends(alice, bob)
    for minute in range(3):
        make_post(alice, text=f"p{minute}", created_time=at(minute))

    login(bob)
    r = client.get(f"/feed/{alice.id}")
    assert r.status_code == 200
    first = r.json()
    assert [p["content"][0]["text"] for p in first["items"]] == ["p2", "p1"]
    assert first["cursor"] == first["items"][-1]["id"]

    r = client.get(f"/feed/{alice.id}", params={"cursor": first["cursor"]})
    second = r.json()
    assert [p["content"][0]["text"] for p in second["items"]] == ["p0"]
    assert second["cursor"] is None

    r = client.get(f"/feed/{alice.id}", params={"cursor": 999})
    assert r.status_code == 404


def test_feed_of_a_stranger(client: TestClient, alice, bob, login):
    login(bob)
    r = client.get(f"/feed/{alice.id}")
    assert r.status_code == 403
    assert r.json()["code"] == "feed_not_visible"
    assert client.get("/feed/999").status_code == 404


def test_friends_feed_and_mark_read(
    client: TestClient, alice, bob, carol, make_friends, make_post, login
):
    make_friends(alice, bob)
    make_friends(alice, carol)
    make_post(bob, created_time=at(1))
    make_post(carol, created_time=at(2))

    login(alice)
    friends = client.get("/feed/friends").json()["friends"]
    assert [f["friend"]["username"] for f in friends] == ["carol", "bob"]
    assert all(f["is_unread"] for f in friends)

    r = client.post(f"/feed/{carol.id}/read")
    assert r.status_code == 200
    assert r.json()["last_read_post_id"] is not None

    friends = client.get("/feed/friends").json()["friends"]
    assert [f["friend"]["username"] for f in friends] == ["bob", "carol"]
    assert [f["is_unread"] for f in friends] == [True, False]

    r = client.post(f"/feed/{alice.id}/read")
    assert r.status_code == 403
    assert r.json()["code"] == "self_action"
