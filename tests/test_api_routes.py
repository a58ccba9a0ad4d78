"""
HTTP surface: status codes and error bodies
"""
from datetime import datetime, timedelta, timezone


def _register(client, email, first_name="Test", password="Passw0rd!"):
    response = client.post("/users", json={
        "first_name": first_name,
        "last_name": "User",
        "email": email,
        "password": password,
    })
    assert response.status_code == 201
    return response.json()["user_id"]


def _login(client, email, password="Passw0rd!"):
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"X-Authorization": response.json()["session_token"]}


def _create_item(client, headers, starting_bid=100, closes_in=timedelta(hours=1), **extra):
    closing = datetime.now(timezone.utc) + closes_in
    response = client.post("/item", headers=headers, json={
        "title": "Record player",
        "description": "Belt drive",
        "starting_bid": starting_bid,
        "closing_time": closing.isoformat(),
        **extra,
    })
    return response


class TestUserRoutes:

    def test_register_login_logout(self, client):
        user_id = _register(client, "reg@example.com")
        headers = _login(client, "reg@example.com")

        assert client.post("/logout", headers=headers).status_code == 200
        assert client.post("/logout", headers=headers).status_code == 401

        profile = client.get(f"/users/{user_id}").json()
        assert profile["user_id"] == user_id
        assert profile["selling"] == []

    def test_duplicate_email(self, client):
        _register(client, "dup@example.com")
        response = client.post("/users", json={
            "first_name": "Dup", "last_name": "User", "email": "dup@example.com", "password": "Passw0rd!"
        })

        assert response.status_code == 400
        assert response.json() == {"error_message": "Email already exists"}

    def test_weak_password(self, client):
        response = client.post("/users", json={
            "first_name": "Weak", "last_name": "User", "email": "weak@example.com", "password": "password"
        })

        assert response.status_code == 400
        assert "uppercase" in response.json()["error_message"]

    def test_password_with_surrounding_spaces_logs_in(self, client):
        _register(client, "spaced@example.com", password=" Passw0rd! ")

        headers = _login(client, "spaced@example.com", password=" Passw0rd! ")
        assert client.post("/logout", headers=headers).status_code == 200

        response = client.post("/login", json={"email": "spaced@example.com", "password": "Passw0rd!"})
        assert response.status_code == 400

    def test_names_are_trimmed(self, client):
        user_id = _register(client, "trim@example.com", first_name="  Tess ")
        assert client.get(f"/users/{user_id}").json()["first_name"] == "Tess"

    def test_bad_login(self, client):
        _register(client, "who@example.com")
        response = client.post("/login", json={"email": "who@example.com", "password": "Wrong0ne!"})

        assert response.status_code == 400
        assert response.json()["error_message"] == "Invalid email or password"

    def test_unknown_user(self, client):
        assert client.get("/users/999").status_code == 404


class TestItemRoutes:

    def test_create_and_get(self, client):
        _register(client, "seller@example.com", first_name="Sela")
        headers = _login(client, "seller@example.com")

        response = _create_item(client, headers, starting_bid=25)
        assert response.status_code == 201
        item_id = response.json()["item_id"]

        detail = client.get(f"/item/{item_id}").json()
        assert detail["first_name"] == "Sela"
        assert detail["status"] == "OPEN"
        assert float(detail["current_price"]) == 25
        assert detail["current_holder"] is None

    def test_create_requires_auth(self, client):
        assert _create_item(client, {}).status_code == 401

    def test_closing_in_past(self, client):
        _register(client, "past@example.com")
        headers = _login(client, "past@example.com")

        response = _create_item(client, headers, closes_in=timedelta(hours=-1))
        assert response.status_code == 400

    def test_invalid_category(self, client):
        _register(client, "cat@example.com")
        headers = _login(client, "cat@example.com")

        response = _create_item(client, headers, categories=[424242])
        assert response.status_code == 400
        assert response.json()["error_message"] == "Invalid category ID(s)"

    def test_missing_item(self, client):
        assert client.get("/item/9999").status_code == 404

    def test_non_numeric_id_is_not_found(self, client):
        response = client.get("/item/abc")
        assert response.status_code == 404
        assert "error_message" in response.json()

    def test_categories(self, client):
        categories = client.get("/categories").json()
        names = [category["name"] for category in categories]
        assert names == sorted(names)
        assert len(names) > 0


class TestBidRoutes:

    def test_bid_flow(self, client):
        _register(client, "owner@example.com")
        _register(client, "alice@example.com", first_name="Alice")
        _register(client, "bob@example.com", first_name="Bob")
        owner = _login(client, "owner@example.com")
        alice = _login(client, "alice@example.com")
        bob = _login(client, "bob@example.com")
        item_id = _create_item(client, owner, starting_bid=100).json()["item_id"]

        response = client.post(f"/item/{item_id}/bid", headers=alice, json={"amount": 150})
        assert response.status_code == 201
        assert "bid_id" in response.json()

        response = client.post(f"/item/{item_id}/bid", headers=bob, json={"amount": 150})
        assert response.status_code == 400
        assert "error_message" in response.json()

        assert client.post(f"/item/{item_id}/bid", headers=bob, json={"amount": 200}).status_code == 201
        assert client.post(f"/item/{item_id}/bid", headers=owner, json={"amount": 300}).status_code == 403

        history = client.get(f"/item/{item_id}/bid").json()
        assert [bid["first_name"] for bid in history] == ["Bob", "Alice"]

        detail = client.get(f"/item/{item_id}").json()
        assert float(detail["current_price"]) == 200
        assert detail["current_holder"]["first_name"] == "Bob"

    def test_bid_requires_auth(self, client):
        assert client.post("/item/1/bid", json={"amount": 10}).status_code == 401

    def test_bid_on_missing_item(self, client):
        _register(client, "lost@example.com")
        headers = _login(client, "lost@example.com")

        assert client.post("/item/9999/bid", headers=headers, json={"amount": 10}).status_code == 404

    def test_non_positive_amount(self, client):
        _register(client, "o@example.com")
        _register(client, "b@example.com")
        item_id = _create_item(client, _login(client, "o@example.com")).json()["item_id"]

        response = client.post(f"/item/{item_id}/bid", headers=_login(client, "b@example.com"),
                               json={"amount": 0})
        assert response.status_code == 400

    def test_history_of_missing_item(self, client):
        assert client.get("/item/9999/bid").status_code == 404


class TestSearchRoutes:

    def test_search(self, client):
        _register(client, "s@example.com")
        headers = _login(client, "s@example.com")
        _create_item(client, headers)

        rows = client.get("/search", params={"q": "record"}).json()
        assert len(rows) == 1
        assert client.get("/search", params={"q": "nothing-like-this"}).json() == []

    def test_status_requires_auth(self, client):
        response = client.get("/search", params={"status": "OPEN"})

        assert response.status_code == 400
        assert response.json()["error_message"] == "Authentication required for status filters"

    def test_invalid_status(self, client):
        _register(client, "st@example.com")
        headers = _login(client, "st@example.com")

        response = client.get("/search", params={"status": "SOLD"}, headers=headers)
        assert response.status_code == 400
        assert response.json()["error_message"] == "Invalid status value"

    def test_status_open(self, client):
        _register(client, "mine@example.com")
        _register(client, "theirs@example.com")
        mine = _login(client, "mine@example.com")
        _create_item(client, mine)
        _create_item(client, _login(client, "theirs@example.com"))

        rows = client.get("/search", params={"status": "OPEN"}, headers=mine).json()
        assert len(rows) == 1

    def test_negative_limit(self, client):
        assert client.get("/search", params={"limit": -1}).status_code == 400


class TestQuestionRoutes:

    def test_question_flow(self, client):
        _register(client, "qo@example.com")
        _register(client, "qa@example.com")
        owner = _login(client, "qo@example.com")
        asker = _login(client, "qa@example.com")
        item_id = _create_item(client, owner).json()["item_id"]

        response = client.post(f"/item/{item_id}/question", headers=asker, json={"question_text": "Working?"})
        assert response.status_code == 200
        question_id = response.json()["question_id"]

        assert client.post(f"/item/{item_id}/question", headers=owner,
                           json={"question_text": "Me?"}).status_code == 403
        assert client.post(f"/question/{question_id}", headers=asker,
                           json={"answer_text": "Yes"}).status_code == 403

        response = client.post(f"/question/{question_id}", headers=owner, json={"answer_text": "Yes"})
        assert response.json() == {"success": True}

        response = client.post(f"/question/{question_id}", headers=owner, json={"answer_text": "No"})
        assert response.status_code == 409

        questions = client.get(f"/item/{item_id}/question").json()
        assert questions[0]["answer_text"] == "Yes"


class TestHealth:

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["lock_backend"] == "memory"

    def test_trace_id_echoed(self, client):
        response = client.get("/health", headers={"X-Trace-ID": "abc123"})
        assert response.headers["X-Trace-ID"] == "abc123"
