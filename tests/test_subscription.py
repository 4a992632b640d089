"""
测试订阅额度计数、付款点击通知和演示模式
"""
import pytest
import resend

from nepriziv.infrastructure.exceptions import NotificationError
from nepriziv.infrastructure.external_apis import ResendClient
from nepriziv.models.contact import ContactSubmission
from nepriziv.models.subscription import DemoVisitor, UserSubscription
from nepriziv.models.user import User
from nepriziv.services.core.entitlements import ACTION_DOCUMENT, DEMO_QUOTA_MESSAGE, QUOTA_MESSAGES
from nepriziv.services.core.subscription_service import SubscriptionService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def upload(client, headers, name="scan.pdf", data=b"%PDF-1.4 test"):
    content_type = "image/png" if name.endswith(".png") else "application/pdf"
    return client.post(
        "/api/documents",
        files={"file": (name, data, content_type)},
        data={"document_type": "analysis"},
        headers=headers,
    ).json()


def test_new_user_subscription_state(client, user_headers):
    body = client.get("/api/subscription", headers=user_headers).json()
    assert body["code"] == 200
    state = body["data"]
    assert state["is_active"] is False
    assert state["remaining_document_uploads"] == 3
    assert state["remaining_ai_questions"] == 3
    assert state["can_upload_document"] is True


def test_free_document_uploads_run_out(client, user_headers):
    for _ in range(3):
        assert upload(client, user_headers)["code"] == 200

    body = upload(client, user_headers)
    assert body["code"] == 402
    assert body["msg"] == QUOTA_MESSAGES["document"]

    state = client.get("/api/subscription", headers=user_headers).json()["data"]
    assert state["document_uploads_used"] == 3
    assert state["remaining_document_uploads"] == 0


def test_admin_override_lifts_limits(client, db, user_headers):
    for _ in range(3):
        upload(client, user_headers)
    subscription = db.query(UserSubscription).first()
    subscription.admin_override = True
    db.commit()

    assert upload(client, user_headers)["code"] == 200
    db.expire_all()
    assert db.query(UserSubscription).first().document_uploads_used == 4


def test_payment_click_records_contact_and_notifies(client, db, user_headers, mailer):
    body = client.post("/api/subscription/payment-click", headers=user_headers).json()
    assert body == {"code": 200, "data": {"success": True}, "msg": "Успешно"}

    submission = db.query(ContactSubmission).one()
    assert submission.status == "payment_click"
    assert submission.name == "Оплата подписки: Иван Петров"
    assert "Email: user@nepriziv.ru" in submission.message
    assert db.query(UserSubscription).first().payment_link_clicked_at is not None

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["subject"] == "💳 Переход к оплате: Иван Петров"


def test_payment_click_without_mailer_config(client, user_headers, mailer):
    mailer.configured = False
    body = client.post("/api/subscription/payment-click", headers=user_headers).json()
    assert body["code"] == 200
    assert mailer.sent == []


def test_demo_visit_and_status(client, db, demo_headers):
    headers = {**demo_headers, "User-Agent": "Mozilla/5.0 (Linux; Android 14) Chrome/120.0 Mobile Safari/537.36"}
    body = client.post("/api/demo/visit", headers=headers).json()
    assert body["code"] == 200
    assert body["data"]["os"] == "Android"
    assert body["data"]["device_type"] == "mobile"

    status = client.get("/api/demo/status", headers=demo_headers).json()["data"]
    assert status["is_demo"] is True
    assert status["remaining_demo_documents"] == 1
    assert db.query(DemoVisitor).count() == 1


def test_demo_visit_rejects_registered_user(client, user_headers):
    body = client.post("/api/demo/visit", headers=user_headers).json()
    assert body["code"] == 400
    status = client.get("/api/demo/status", headers=user_headers).json()["data"]
    assert status["is_demo"] is False


def test_demo_document_limit(client, demo_headers):
    assert upload(client, demo_headers, name="a.png", data=PNG_BYTES)["code"] == 200
    body = upload(client, demo_headers, name="b.png", data=PNG_BYTES)
    assert body["code"] == 402
    assert body["msg"] == DEMO_QUOTA_MESSAGE
    status = client.get("/api/demo/status", headers=demo_headers).json()["data"]
    assert status["document_uploads_used"] == 1
    assert status["remaining_demo_documents"] == 0


def test_upload_slot_is_taken_before_storage(client, db, storage, user_headers, monkeypatch):
    subscription = db.query(UserSubscription).first()
    subscription.document_uploads_used = 2
    db.commit()

    user = db.query(User).filter(User.email == "user@nepriziv.ru").first()
    original_upload = storage.upload_bytes
    concurrent = []

    def upload_with_parallel_request(*args, **kwargs):
        # 上传进行中另一个请求抢最后一个名额
        concurrent.append(SubscriptionService.consume(db, user, ACTION_DOCUMENT))
        return original_upload(*args, **kwargs)

    monkeypatch.setattr(storage, "upload_bytes", upload_with_parallel_request)

    assert upload(client, user_headers)["code"] == 200
    assert concurrent == [False]
    db.expire_all()
    assert db.query(UserSubscription).first().document_uploads_used == 3
    assert upload(client, user_headers)["code"] == 402


def test_failed_storage_upload_returns_slot(client, db, storage, user_headers, monkeypatch):
    monkeypatch.setattr(storage, "upload_bytes", lambda *args, **kwargs: False)
    body = upload(client, user_headers)
    assert body["code"] == 500
    assert body["msg"] == "Не удалось загрузить файл"
    state = client.get("/api/subscription", headers=user_headers).json()["data"]
    assert state["document_uploads_used"] == 0


def test_release_never_goes_negative(client, db, user_headers):
    user = db.query(User).filter(User.email == "user@nepriziv.ru").first()
    SubscriptionService.release(db, user, ACTION_DOCUMENT)
    db.expire_all()
    assert db.query(UserSubscription).first().document_uploads_used == 0


async def test_resend_client_sends_through_sdk(monkeypatch):
    sent = []
    monkeypatch.setattr(resend.Emails, "send", lambda params: sent.append(params) or {"id": "email-1"})

    result = await ResendClient(api_key="re_test").send_email("Тема", "<p>текст</p>", to="admin@nepriziv.ru")
    assert result == {"id": "email-1"}
    assert sent[0]["to"] == ["admin@nepriziv.ru"]
    assert sent[0]["subject"] == "Тема"


async def test_resend_client_errors(monkeypatch):
    with pytest.raises(NotificationError):
        await ResendClient(api_key="").send_email("Тема", "<p>текст</p>")

    def fail(params):
        raise RuntimeError("503")

    monkeypatch.setattr(resend.Emails, "send", fail)
    with pytest.raises(NotificationError):
        await ResendClient(api_key="re_test").send_email("Тема", "<p>текст</p>")
