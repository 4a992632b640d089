"""
测试公共配置

内存SQLite代替MySQL，对象存储 / AI网关 / 邮件用假实现替换；
TestClient 不进入上下文，所以不会触发启动事件（不连接MinIO）
"""
import json
import os

os.environ["DATABASE_URI"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["AI_GATEWAY_API_KEY"] = "test-key"
os.environ["RESEND_API_KEY"] = ""

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from nepriziv.api.dependencies import get_ai_client, get_db, get_mailer, get_storage
from nepriziv.db.base import init_db
from nepriziv.infrastructure.storage.object_storage import ObjectStorageInterface, StorageConfig
from nepriziv.main import app
from nepriziv.models.user import ROLE_ADMIN, ROLE_MODERATOR, User
from nepriziv.services.core.admin_service import AdminService
from nepriziv.services.core.contact_service import contact_rate_limiter

PASSWORD = "Secret123"


class FakeStorage(ObjectStorageInterface):
    """内存对象存储"""

    def __init__(self):
        super().__init__(StorageConfig(endpoint="minio.test", access_key="", secret_key="", secure=False))
        self.objects: Dict[str, bytes] = {}

    def _key(self, bucket_name, object_name):
        return f"{bucket_name}/{object_name}"

    def ensure_bucket_exists(self, bucket_name):
        return True

    def upload_bytes(self, data, bucket_name, object_name, content_type=None):
        self.objects[self._key(bucket_name, object_name)] = data
        return True

    def get_file_bytes(self, bucket_name, object_name):
        return self.objects.get(self._key(bucket_name, object_name))

    def get_file_url(self, bucket_name, object_name, expires=3600):
        return f"http://minio.test/{bucket_name}/{object_name}?X-Amz-Expires={expires}"

    def get_public_url(self, bucket_name, object_name):
        return f"http://minio.test/{bucket_name}/{object_name}"

    def delete_file(self, bucket_name, object_name):
        return self.objects.pop(self._key(bucket_name, object_name), None) is not None

    def initialize(self):
        return True


def completion(content: str) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def sse_chunks(*parts: str) -> List[bytes]:
    chunks = [
        f"data: {json.dumps({'choices': [{'delta': {'content': part}}]}, ensure_ascii=False)}\n\n".encode("utf-8")
        for part in parts
    ]
    chunks.append(b"data: [DONE]\n\n")
    return chunks


class FakeAIClient:
    """
    AI网关假实现

    responses: chat_completion 依次返回的结果（异常对象会被抛出）
    stream: stream_chat_completion 逐块返回的字节
    """

    def __init__(self):
        self.responses: List[Any] = []
        self.stream: List[bytes] = []
        self.stream_error: Optional[Exception] = None
        self.requests: List[Dict[str, Any]] = []

    async def chat_completion(self, payload):
        self.requests.append(payload)
        result = self.responses.pop(0) if self.responses else completion("")
        if isinstance(result, Exception):
            raise result
        return result

    async def stream_chat_completion(self, payload):
        self.requests.append(payload)
        if self.stream_error is not None:
            raise self.stream_error
        for chunk in self.stream:
            yield chunk


class FakeMailer:

    def __init__(self, configured: bool = True):
        self.configured = configured
        self.sent: List[Dict[str, Any]] = []

    @property
    def is_configured(self):
        return self.configured

    async def send_email(self, subject, html, to=None, sender=None):
        self.sent.append({"subject": subject, "html": html})
        return {"status": 200}


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def ai_client():
    return FakeAIClient()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(engine, storage, ai_client, mailer):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_ai_client] = lambda: ai_client
    app.dependency_overrides[get_mailer] = lambda: mailer
    contact_rate_limiter.reset()

    yield TestClient(app)

    app.dependency_overrides.clear()
    contact_rate_limiter.reset()


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def signup(client, email: str = "user@nepriziv.ru", full_name: str = "Иван Петров") -> Dict[str, Any]:
    response = client.post("/api/auth/signup", json={
        "email": email,
        "password": PASSWORD,
        "full_name": full_name,
    })
    body = response.json()
    assert body["code"] == 200, body
    return body["data"]


@pytest.fixture
def user_token(client):
    return signup(client)["access_token"]


@pytest.fixture
def user_headers(user_token):
    return auth_header(user_token)


@pytest.fixture
def demo_headers(client):
    body = client.post("/api/auth/anonymous").json()
    return auth_header(body["data"]["access_token"])


def grant(db, email: str, role: str) -> None:
    user = db.query(User).filter(User.email == email).first()
    AdminService.grant_role(db, user, role)


@pytest.fixture
def admin_headers(client, db):
    data = signup(client, email="admin@nepriziv.ru", full_name="Админ")
    grant(db, "admin@nepriziv.ru", ROLE_ADMIN)
    return auth_header(data["access_token"])


@pytest.fixture
def moderator_headers(client, db):
    data = signup(client, email="moder@nepriziv.ru", full_name="Модератор")
    grant(db, "moder@nepriziv.ru", ROLE_MODERATOR)
    return auth_header(data["access_token"])

