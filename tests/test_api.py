"""
Tests for the HTTP surface over the session store.
"""
import pytest
from fastapi.testclient import TestClient

from main import app, get_store
from seed import create_session_store
from session import SessionEvent


@pytest.fixture
def api_store(test_settings):
    return create_session_store(test_settings)


@pytest.fixture
def client(api_store):
    app.dependency_overrides[get_store] = lambda: api_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def logged_in(client):
    res = client.post("/auth/login", json={"email": "john@example.com", "password": "secret"})
    assert res.status_code == 200
    return client


def test_root(client):
    assert client.get("/").json() == {"message": "Scout backend running"}


def test_login_and_me(logged_in):
    me = logged_in.get("/me").json()
    assert me["id"] == "1"
    assert me["name"] == "John Smith"
    assert me["teams"] == ["High School Football Team"]


def test_me_requires_login(client):
    res = client.get("/me")
    assert res.status_code == 401
    assert res.json()["detail"] == "You must be logged in to do that"


def test_logout(logged_in):
    assert logged_in.post("/auth/logout").json() == {"ok": True}
    assert logged_in.get("/me").status_code == 401


def register_and_login(client, email):
    registered = client.post("/auth/register", json={
        "name": "Bob Ray", "email": email, "password": "hunter22", "confirm_password": "hunter22",
    })
    assert registered.status_code == 201
    res = client.post("/auth/login", json={"email": email, "password": "hunter22"})
    assert res.status_code == 200
    return registered.json(), res.json()


@pytest.mark.parametrize("email", ["Bob@Example.COM", "ann@localhost"])
def test_login_uses_the_email_exactly_as_registered(client, api_store, email):
    registered, logged_in = register_and_login(client, email)

    assert logged_in["id"] == registered["id"]
    assert logged_in["email"] == email
    assert len(api_store.directory) == 3


def test_login_email_is_case_sensitive(client, api_store):
    res = client.post("/auth/login", json={"email": "john@EXAMPLE.COM", "password": "pw"})

    assert res.status_code == 200
    assert res.json()["id"] != "1"
    assert res.json()["email"] == "john@EXAMPLE.COM"
    assert len(api_store.directory) == 3


def test_register(client):
    res = client.post("/auth/register", json={
        "name": "Maria Lopez",
        "email": "maria@example.com",
        "password": "hunter22",
        "confirm_password": "hunter22",
    })
    assert res.status_code == 201
    assert res.json()["email"] == "maria@example.com"
    assert client.get("/me").status_code == 401


def test_register_failures(client):
    weak = client.post("/auth/register", json={
        "name": "Maria", "email": "maria@example.com", "password": "abc", "confirm_password": "abc",
    })
    assert weak.status_code == 400
    assert weak.json()["detail"] == "Password must be at least 6 characters"

    taken = client.post("/auth/register", json={
        "name": "John", "email": "john@example.com", "password": "hunter22", "confirm_password": "hunter22",
    })
    assert taken.status_code == 409
    assert taken.json()["detail"] == "Email already registered"


def test_search_and_history(client):
    res = client.get("/search", params={"q": "coach"})
    assert [u["name"] for u in res.json()] == ["Coach Johnson"]
    assert client.get("/search", params={"q": ""}).json() == []

    assert client.get("/search/history").json() == {"recent_searches": ["coach"]}
    client.delete("/search/history")
    assert client.get("/search/history").json() == {"recent_searches": []}


def test_suggestions(client):
    assert [u["id"] for u in client.get("/search/suggestions").json()] == ["2"]


def test_get_user(client):
    assert client.get("/users/2").json()["email"] == "coach@example.com"
    assert client.get("/users/99").status_code == 404


def test_replace_profile(logged_in):
    me = logged_in.get("/me").json()
    me["name"] = "Johnny Smith"
    me["teams"] = []

    res = logged_in.put("/me", json=me)

    assert res.status_code == 200
    assert logged_in.get("/users/1").json()["name"] == "Johnny Smith"
    assert logged_in.get("/users/1").json()["teams"] == []


def test_replace_profile_of_someone_else(logged_in):
    coach = logged_in.get("/users/2").json()
    assert logged_in.put("/me", json=coach).status_code == 400


def test_patch_profile(logged_in):
    res = logged_in.patch("/me", json={"background_info": "Dual-threat QB", "teams": ["Varsity"]})
    body = res.json()
    assert body["background_info"] == "Dual-threat QB"
    assert body["teams"] == ["Varsity"]


def test_patch_profile_is_a_single_replace(logged_in, api_store):
    events = []
    api_store.subscribe(lambda event, payload: events.append(event))

    body = logged_in.patch("/me", json={"background_info": "Pocket passer", "teams": ["Varsity"]}).json()

    assert events == [SessionEvent.PROFILE_UPDATED]
    assert body["name"] == "John Smith"
    assert len(body["videos"]) == 1


def test_patch_profile_without_changes(logged_in, api_store):
    events = []
    api_store.subscribe(lambda event, payload: events.append(event))

    assert logged_in.patch("/me", json={}).json()["teams"] == ["High School Football Team"]
    assert events == []


def test_change_email(logged_in):
    res = logged_in.post("/me/email", json={"new_email": "coach@example.com", "password": "secret"})
    assert res.status_code == 409

    res = logged_in.post("/me/email", json={"new_email": "js@example.com", "password": "secret"})
    assert res.json()["email"] == "js@example.com"


def test_upload_video(logged_in):
    res = logged_in.post("/me/videos", json={"title": "Senior Season", "url": "https://videos.example.com/s.mp4"})
    assert res.status_code == 201
    assert len(logged_in.get("/me").json()["videos"]) == 2

    assert logged_in.post("/me/videos", json={"title": "No file"}).status_code == 400


def test_conversations(logged_in):
    res = logged_in.get("/conversations")
    [conversation] = res.json()
    assert conversation["id"] == "1"
    assert [p["name"] for p in conversation["participants"]] == ["John Smith", "Coach Johnson"]
    assert conversation["last_message"]["content"] == (
        "Hi John, thanks for reaching out. I'd love to see your highlights."
    )

    assert logged_in.get("/conversations", params={"q": "coach"}).json()[0]["id"] == "1"
    assert logged_in.get("/conversations", params={"q": "smith"}).json() == []


def test_send_message(logged_in):
    res = logged_in.post("/messages", json={"conversation_id": "1", "content": "hello"})
    assert res.status_code == 201
    assert res.json()["sender_id"] == "1"

    messages = logged_in.get("/conversations/1/messages").json()
    assert [m["content"] for m in messages][-1] == "hello"
    assert len(messages) == 3


def test_send_message_errors(client, api_store):
    res = client.post("/messages", json={"conversation_id": "1", "content": "hi"})
    assert res.status_code == 401
    assert res.json()["detail"] == "You must be logged in to do that"
    assert len(api_store.get_conversation("1").messages) == 2

    client.post("/auth/login", json={"email": "john@example.com", "password": "pw"})
    res = client.post("/messages", json={"conversation_id": "nope", "content": "hi"})
    assert res.status_code == 404
    assert res.json()["detail"] == "Conversation not found"


def test_start_conversation(logged_in):
    res = logged_in.post("/conversations/start", json={"other_user_id": "2"})
    assert res.json()["id"] == "1"

    assert logged_in.post("/conversations/start", json={"other_user_id": "1"}).status_code == 400
