"""
测试对话历史的增删改查
"""
from conftest import auth_header, signup


def create(client, headers, **body):
    return client.post("/api/chat/conversations", json=body, headers=headers).json()["data"]


def test_title_from_first_message(client, user_headers):
    long_message = "Меня признали годным, хотя у меня плоскостопие третьей степени и сколиоз"
    conversation = create(client, user_headers, first_message=long_message)
    assert conversation["title"] == long_message[:50]

    conversation = create(client, user_headers, title="  Мой вопрос  ")
    assert conversation["title"] == "Мой вопрос"


def test_messages_and_rename(client, user_headers):
    conversation = create(client, user_headers)
    url = f"/api/chat/conversations/{conversation['id']}"

    client.post(f"{url}/messages", json={"role": "user", "content": "Первый вопрос"}, headers=user_headers)
    client.post(f"{url}/messages", json={"role": "assistant", "content": "Ответ"}, headers=user_headers)
    messages = client.get(f"{url}/messages", headers=user_headers).json()["data"]
    assert [m["role"] for m in messages] == ["user", "assistant"]

    listing = client.get("/api/chat/conversations", headers=user_headers).json()["data"]
    assert listing[0]["title"] == "Первый вопрос"

    renamed = client.put(url, json={"title": "Переименовано"}, headers=user_headers).json()
    assert renamed["data"]["title"] == "Переименовано"

    body = client.put(url, json={"title": "   "}, headers=user_headers).json()
    assert body["code"] == 400
    assert body["data"]["details"][0]["message"] == "Название не может быть пустым"


def test_empty_message_rejected(client, user_headers):
    conversation = create(client, user_headers)
    body = client.post(f"/api/chat/conversations/{conversation['id']}/messages",
                       json={"role": "user", "content": "  "}, headers=user_headers).json()
    assert body["code"] == 400


def test_delete_conversation_with_messages(client, user_headers):
    conversation = create(client, user_headers)
    url = f"/api/chat/conversations/{conversation['id']}"
    client.post(f"{url}/messages", json={"role": "user", "content": "вопрос"}, headers=user_headers)

    body = client.delete(url, headers=user_headers).json()
    assert body["code"] == 200
    assert body["data"]["id"] == conversation["id"]
    assert client.get(f"{url}/messages", headers=user_headers).json()["code"] == 404
    assert client.get("/api/chat/conversations", headers=user_headers).json()["data"] == []


def test_conversations_are_private(client, user_headers):
    conversation = create(client, user_headers)
    other = auth_header(signup(client, email="other@nepriziv.ru")["access_token"])
    url = f"/api/chat/conversations/{conversation['id']}"

    assert client.get(f"{url}/messages", headers=other).json()["code"] == 404
    assert client.delete(url, headers=other).json()["code"] == 404
    assert client.get("/api/chat/conversations", headers=other).json()["data"] == []
