"""
测试联系表单：限流先于校验，管理员处理工单
"""
from nepriziv.models.contact import ContactSubmission

FORM = {
    "name": "  Алексей ",
    "phone": "+7 (999) 123-45-67",
    "email": "",
    "message": "Нужна консультация по категории годности",
}


def submit(client, body, ip="10.0.0.1"):
    return client.post("/api/contact", json=body, headers={"X-Forwarded-For": f"{ip}, 172.16.0.1"}).json()


def test_contact_success(client, db):
    body = submit(client, FORM)
    assert body["code"] == 200
    assert body["data"]["success"] is True
    assert body["data"]["message"] == "Заявка успешно отправлена"

    row = db.query(ContactSubmission).first()
    assert str(row.id) == body["data"]["id"]
    assert row.name == "Алексей"
    assert row.email is None
    assert row.status == "new"
    assert row.ip_address == "10.0.0.1"


def test_contact_validation_details(client):
    body = submit(client, {"name": "А", "phone": "номер", "message": "коротко"})
    assert body["code"] == 400
    fields = {item["field"]: item["message"] for item in body["data"]["details"]}
    assert fields["name"] == "Имя должно содержать минимум 2 символа"
    assert fields["phone"] == "Недопустимый формат телефона"
    assert fields["message"] == "Сообщение должно содержать минимум 10 символов"


def test_contact_rate_limit_counts_every_attempt(client, db):
    # 不合法的提交也占用名额
    assert submit(client, {"name": "А"})["code"] == 400

    body = submit(client, FORM)
    assert body["code"] == 429
    assert body["msg"].startswith("Пожалуйста, подождите")
    assert body["msg"].endswith("мин. перед следующей заявкой")
    assert body["data"] == {"error": "Слишком частые запросы"}
    assert db.query(ContactSubmission).count() == 0

    # 其它IP不受影响
    assert submit(client, FORM, ip="10.0.0.2")["code"] == 200


def test_contact_rejects_non_object_body(client):
    body = client.post("/api/contact", json=["name"]).json()
    assert body["code"] == 400
    assert body["data"]["details"] == [{"field": "", "message": "Неверный формат запроса"}]


def test_admin_manages_contacts(client, admin_headers):
    contact_id = submit(client, FORM)["data"]["id"]

    listing = client.get("/api/admin/contacts", headers=admin_headers).json()["data"]
    assert listing["total"] == 1
    assert listing["items"][0]["email"] == ""

    updated = client.put(f"/api/admin/contacts/{contact_id}", json={"status": "processed"}, headers=admin_headers).json()
    assert updated["data"]["status"] == "processed"
    assert client.get("/api/admin/contacts?status=new", headers=admin_headers).json()["data"]["total"] == 0

    deleted = client.delete(f"/api/admin/contacts/{contact_id}", headers=admin_headers).json()
    assert deleted["msg"] == "Заявка удалена"
    missing = client.delete(f"/api/admin/contacts/{contact_id}", headers=admin_headers).json()
    assert missing == {"code": 404, "data": None, "msg": "Заявка не найдена"}


def test_contacts_are_admin_only(client, user_headers):
    body = client.get("/api/admin/contacts", headers=user_headers).json()
    assert body["code"] == 403
    assert body["msg"] == "Недостаточно прав"
