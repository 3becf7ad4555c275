from fastapi.testclient import TestClient


def test_request_and_accept_flow(client: TestClient, alice, bob, login):
    login(alice)
    r = client.get(f"/users/{bob.username}")
    assert r.json()["relationship"] == "none"

    r = client.post(f"/friends/request/{bob.id}")
    assert r.status_code == 200
    request_id = r.json()["request"]["id"]

    r = client.get("/friends/requests/outgoing")
    assert [req["user"]["id"] for req in r.json()["requests"]] == [bob.id]

    # a second request is refused with its code
    r = client.post(f"/friends/request/{bob.id}")
    assert r.status_code == 403
    assert r.json()["code"] == "already_requested"

    # the sender cannot accept
    r = client.post(f"/friends/requests/{request_id}/accept")
    assert r.status_code == 404

    login(bob)
    r = client.get("/friends/requests")
    assert [req["user"]["id"] for req in r.json()["requests"]] == [alice.id]

    r = client.post(f"/friends/requests/{request_id}/accept")
    assert r.status_code == 200
    owners = [f["owner_id"] for f in r.json()["friendships"]]
    assert owners == [bob.id, alice.id]

    r = client.get("/friends")
    assert [f["user"]["username"] for f in r.json()["friends"]] == ["alice"]

    login(alice)
    r = client.get(f"/users/{bob.username}")
    assert r.json()["relationship"] == "friends"
    assert client.get("/friends/requests/outgoing").json()["requests"] == []


def test_reject_and_cancel(client: TestClient, alice, bob, login):
    login(alice)
    request_id = client.post(f"/friends/request/{bob.id}").json()["request"]["id"]
    r = client.post(f"/friends/requests/{request_id}/cancel")
    assert r.status_code == 200
    r = client.post(f"/friends/requests/{request_id}/cancel")
    assert r.status_code == 404

    request_id = client.post(f"/friends/request/{bob.id}").json()["request"]["id"]
    login(bob)
    r = client.post(f"/friends/requests/{request_id}/reject")
    assert r.status_code == 200
    assert client.get("/friends/requests").json()["requests"] == []


def test_self_request(client: TestClient, alice, login):
    login(alice)
    r = client.post(f"/friends/request/{alice.id}")
    assert r.status_code == 403
    assert r.json()["code"] == "self_request"


def test_unfriend_twice(client: TestClient, alice, bob, make_friends, login):
    make_friends(alice, bob)
    login(alice)
    assert client.delete(f"/friends/{bob.id}").status_code == 200
    r = client.delete(f"/friends/{bob.id}")
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


def test_favorite_toggle(client: TestClient, alice, bob, make_friends, login):
    make_friends(alice, bob)
    login(alice)
    r = client.post(f"/friends/{bob.id}/favorite", json={"enabled": True})
    assert r.status_code == 200
    assert r.json()["friendship"]["is_favorite"] is True

    r = client.get("/friends")
    assert r.json()["friends"][0]["is_favorite"] is True

    r = client.post(f"/friends/{alice.id}/favorite", json={"enabled": True})
    assert r.status_code == 404
