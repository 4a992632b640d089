"""
测试管理后台：权限、用户与角色、订阅调整、演示访客
"""
from conftest import signup

from nepriziv.models.subscription import UserSubscription
from nepriziv.models.user import User


def user_id(db, email="user@nepriziv.ru"):
    return str(db.query(User).filter(User.email == email).first().id)


def test_admin_routes_require_admin(client, user_headers, moderator_headers):
    for headers in (user_headers, moderator_headers):
        body = client.post("/api/admin/users", json={"action": "list"}, headers=headers).json()
        assert body == {"code": 403, "data": None, "msg": "Недостаточно прав"}
    assert client.get("/api/admin/users").json()["code"] == 401


def test_users_action_list(client, admin_headers, demo_headers):
    signup(client, email="second@nepriziv.ru")
    body = client.post("/api/admin/users", json={"action": "list"}, headers=admin_headers).json()
    emails = {u["email"] for u in body["data"]["users"]}
    # 匿名会话不出现在列表里
    assert emails == {"admin@nepriziv.ru", "second@nepriziv.ru"}
    assert set(body["data"]["users"][0]) == {"id", "email", "created_at"}


def test_users_action_unknown(client, admin_headers):
    body = client.post("/api/admin/users", json={"action": "delete"}, headers=admin_headers).json()
    assert body["code"] == 400
    assert body["msg"] == "Unknown action"


def test_list_users_with_roles_and_subscription(client, admin_headers, user_headers):
    items = client.get("/api/admin/users", headers=admin_headers).json()["data"]
    by_email = {item["email"]: item for item in items}
    assert by_email["admin@nepriziv.ru"]["roles"] == ["admin", "user"]
    assert by_email["user@nepriziv.ru"]["roles"] == ["user"]
    assert by_email["user@nepriziv.ru"]["subscription"]["remaining_ai_questions"] == 3


def test_grant_and_revoke_role(client, db, admin_headers, user_headers):
    target = user_id(db)
    granted = client.post(f"/api/admin/users/{target}/roles", json={"role": "moderator"}, headers=admin_headers).json()
    assert granted["msg"] == "Роль назначена"
    assert granted["data"]["roles"] == ["moderator", "user"]

    # 新角色立刻生效
    assert client.get("/api/admin/forum/posts", headers=user_headers).json()["code"] == 200

    revoked = client.delete(f"/api/admin/users/{target}/roles/moderator", headers=admin_headers).json()
    assert revoked["data"] == {"user_id": target, "role": "moderator"}
    assert client.get("/api/admin/forum/posts", headers=user_headers).json()["code"] == 403

    again = client.delete(f"/api/admin/users/{target}/roles/moderator", headers=admin_headers).json()
    assert again == {"code": 404, "data": None, "msg": "Роль не найдена"}


def test_grant_unknown_role(client, db, admin_headers, user_headers):
    body = client.post(f"/api/admin/users/{user_id(db)}/roles", json={"role": "owner"}, headers=admin_headers).json()
    assert body["code"] == 400
    assert body["msg"] == "Неизвестная роль"


def test_grant_role_to_missing_user(client, admin_headers):
    body = client.post("/api/admin/users/123/roles", json={"role": "moderator"}, headers=admin_headers).json()
    assert body["msg"] == "Пользователь не найден"


def test_admin_cannot_drop_own_admin_role(client, db, admin_headers):
    own_id = user_id(db, "admin@nepriziv.ru")
    body = client.delete(f"/api/admin/users/{own_id}/roles/admin", headers=admin_headers).json()
    assert body["code"] == 400
    assert body["msg"] == "Нельзя снять роль администратора с самого себя"


def test_subscription_admin_update(client, db, admin_headers, user_headers):
    subscription = db.query(UserSubscription).filter(UserSubscription.user_id == int(user_id(db))).first()
    subscription.document_uploads_used = 3
    subscription.ai_questions_used = 2
    db.commit()

    body = client.put(
        f"/api/admin/subscriptions/{user_id(db)}",
        json={"is_paid": True, "paid_until": "2099-01-01T00:00:00+00:00", "free_ai_limit": 10, "reset_counters": True},
        headers=admin_headers,
    ).json()
    assert body["msg"] == "Подписка обновлена"
    state = body["data"]
    assert state["is_active"] is True
    assert state["paid_until"] == "2099-01-01T03:00:00"
    assert state["document_uploads_used"] == 0
    assert state["remaining_ai_questions"] == 10

    own = client.get("/api/subscription", headers=user_headers).json()["data"]
    assert own["is_paid"] is True

    listing = client.get("/api/admin/subscriptions", headers=admin_headers).json()["data"]
    assert {item["email"] for item in listing["items"]} == {"admin@nepriziv.ru", "user@nepriziv.ru"}


def test_subscription_admin_update_validation(client, db, admin_headers, user_headers):
    body = client.put(
        f"/api/admin/subscriptions/{user_id(db)}", json={"free_document_limit": -1}, headers=admin_headers
    ).json()
    assert body["code"] == 400
    assert body["data"]["details"][0]["message"] == "Лимит не может быть отрицательным"

    missing = client.put("/api/admin/subscriptions/42", json={"is_paid": True}, headers=admin_headers).json()
    assert missing["code"] == 404


def test_demo_visitors_listing(client, admin_headers, demo_headers):
    client.post("/api/demo/visit", headers=demo_headers)
    data = client.get("/api/admin/demo-visitors", headers=admin_headers).json()["data"]
    assert data["total"] == 1
    assert data["items"][0]["document_uploads_used"] == 0
