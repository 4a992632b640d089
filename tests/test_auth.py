"""
测试注册、登录、匿名会话和统一响应格式
"""
from conftest import PASSWORD, auth_header, signup


def test_root_health(client):
    body = client.get("/").json()
    assert body["code"] == 200
    assert body["data"]["status"] == "online"


def test_signup_returns_token_and_user(client):
    data = signup(client, email="Petrov@Nepriziv.ru")
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "petrov@nepriziv.ru"
    assert data["user"]["roles"] == ["user"]
    assert data["user"]["is_anonymous"] is False


def test_signup_duplicate_email(client):
    signup(client)
    body = client.post("/api/auth/signup", json={
        "email": "user@nepriziv.ru", "password": PASSWORD, "full_name": "Другой Человек",
    }).json()
    assert body["code"] == 400
    assert body["msg"] == "Пользователь с таким email уже зарегистрирован"


def test_signup_validation_errors_are_listed(client):
    response = client.post("/api/auth/signup", json={
        "email": "not-an-email", "password": "short", "full_name": "X1",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["code"] == 400
    fields = {d["field"]: d["message"] for d in body["data"]["details"]}
    assert fields["email"] == "Введите корректный email"
    assert fields["password"] == "Пароль должен содержать минимум 8 символов"
    assert fields["full_name"] == "Имя может содержать только буквы, пробелы и дефисы"


def test_password_complexity(client):
    body = client.post("/api/auth/signup", json={
        "email": "weak@nepriziv.ru", "password": "alllowercase1", "full_name": "Иван",
    }).json()
    assert body["code"] == 400
    assert body["data"]["details"][0]["message"] == "Пароль должен содержать заглавные и строчные буквы, и цифры"


def test_login(client):
    signup(client)
    body = client.post("/api/auth/login", json={"email": "user@nepriziv.ru", "password": PASSWORD}).json()
    assert body["code"] == 200
    assert body["data"]["access_token"]

    body = client.post("/api/auth/login", json={"email": "user@nepriziv.ru", "password": "Wrong1234"}).json()
    assert body["code"] == 401
    assert body["msg"] == "Неверный email или пароль"


def test_me(client, user_headers):
    body = client.get("/api/auth/me", headers=user_headers).json()
    assert body["code"] == 200
    assert body["data"]["email"] == "user@nepriziv.ru"
    assert body["data"]["is_demo"] is False


def test_missing_or_bad_token_is_wrapped(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.json() == {"code": 401, "data": None, "msg": "Требуется аутентификация"}

    body = client.get("/api/auth/me", headers=auth_header("garbage")).json()
    assert body["code"] == 401
    assert body["msg"] == "Неверный токен авторизации"


def test_anonymous_session_is_demo(client, demo_headers):
    body = client.get("/api/auth/me", headers=demo_headers).json()
    assert body["data"]["is_anonymous"] is True
    assert body["data"]["is_demo"] is True
    assert body["data"]["email"] is None


def test_registered_only_routes_reject_demo(client, demo_headers):
    body = client.get("/api/profile", headers=demo_headers).json()
    assert body["code"] == 403
    assert body["msg"] == "Доступно только зарегистрированным пользователям"


def test_unknown_api_route_is_wrapped(client):
    body = client.get("/api/does-not-exist").json()
    assert body["code"] == 404
