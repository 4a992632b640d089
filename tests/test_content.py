"""
测试内容模块：博客、论坛、用户评价、疾病条目、诊断目录
"""
from nepriziv.models.article import DiseaseArticle
from nepriziv.services.core.blog_service import slugify

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32

FORUM_POST = {
    "topic_type": "diagnoses",
    "title": "Сколиоз второй степени",
    "content": "Подскажите, какую категорию дают при сколиозе второй степени?",
}


def create_blog_post(client, headers, **fields):
    payload = {"title": "Как получить военный билет?", "content": "<p>Текст</p>", "status": "published"}
    payload.update(fields)
    return client.post("/api/admin/blog/posts", json=payload, headers=headers).json()


# ---------- 博客 ----------

def test_slugify_transliterates():
    assert slugify("Как получить военный билет?") == "kak-poluchit-voennyy-bilet"
    assert slugify("Ёлка и щука 2025") == "elka-i-schuka-2025"
    assert slugify("???") == ""


def test_blog_post_create_and_public_read(client, admin_headers):
    body = create_blog_post(
        client, admin_headers,
        content='<p onclick="x()">Текст<script>alert(1)</script></p><a href="javascript:alert(1)">ссылка</a>',
    )
    assert body["code"] == 200
    post = body["data"]
    assert post["slug"] == "kak-poluchit-voennyy-bilet"
    assert post["published_at"] is not None
    assert "onclick" not in post["content"]
    assert "<script" not in post["content"]
    assert "javascript:" not in post["content"]

    listing = client.get("/api/blog/posts").json()["data"]
    assert listing["total"] == 1
    public = client.get("/api/blog/posts/kak-poluchit-voennyy-bilet").json()
    assert public["data"]["id"] == post["id"]


def test_blog_drafts_are_hidden(client, admin_headers):
    create_blog_post(client, admin_headers, title="Черновик", slug="chernovik", status="draft")
    assert client.get("/api/blog/posts").json()["data"]["total"] == 0
    body = client.get("/api/blog/posts/chernovik").json()
    assert body == {"code": 404, "data": None, "msg": "Пост не найден"}
    assert len(client.get("/api/admin/blog/posts", headers=admin_headers).json()["data"]) == 1


def test_blog_duplicate_slug(client, admin_headers):
    create_blog_post(client, admin_headers)
    body = create_blog_post(client, admin_headers)
    assert body["code"] == 400
    assert body["msg"] == "Пост с таким URL уже существует"


def test_blog_update_publishes_draft(client, admin_headers):
    post = create_blog_post(client, admin_headers, status="draft")["data"]
    assert post["published_at"] is None
    body = client.put(
        f"/api/admin/blog/posts/{post['id']}",
        json={"status": "published", "excerpt": "Кратко"},
        headers=admin_headers,
    ).json()
    assert body["data"]["status"] == "published"
    assert body["data"]["published_at"] is not None
    assert body["data"]["excerpt"] == "Кратко"


def test_blog_comment_moderation(client, admin_headers, user_headers, moderator_headers):
    post_id = create_blog_post(client, admin_headers)["data"]["id"]

    added = client.post(f"/api/blog/posts/{post_id}/comments", json={"content": "Спасибо!"}, headers=user_headers).json()
    assert added["msg"] == "Ваш комментарий будет опубликован после модерации"
    assert added["data"]["status"] == "pending"
    assert client.get(f"/api/blog/posts/{post_id}/comments").json()["data"] == []

    pending = client.get("/api/admin/blog/comments?status=pending", headers=moderator_headers).json()["data"]
    assert pending[0]["post_title"] == "Как получить военный билет?"
    assert pending[0]["author_name"] == "Иван Петров"

    approved = client.post(f"/api/admin/blog/comments/{added['data']['id']}/approve", headers=moderator_headers).json()
    assert approved["data"]["status"] == "approved"
    public = client.get(f"/api/blog/posts/{post_id}/comments").json()["data"]
    assert [c["author_name"] for c in public] == ["Иван Петров"]


def test_blog_comment_requires_registered_user(client, admin_headers, demo_headers):
    post_id = create_blog_post(client, admin_headers)["data"]["id"]
    assert client.post(f"/api/blog/posts/{post_id}/comments", json={"content": "Привет"}).json()["code"] == 401
    body = client.post(f"/api/blog/posts/{post_id}/comments", json={"content": "Привет"}, headers=demo_headers).json()
    assert body["code"] == 403


def test_blog_delete_own_comment_only(client, admin_headers, user_headers):
    post_id = create_blog_post(client, admin_headers)["data"]["id"]
    comment_id = client.post(
        f"/api/blog/posts/{post_id}/comments", json={"content": "Мой комментарий"}, headers=user_headers
    ).json()["data"]["id"]

    other = client.delete(f"/api/blog/comments/{comment_id}", headers=admin_headers).json()
    assert other["code"] == 404
    own = client.delete(f"/api/blog/comments/{comment_id}", headers=user_headers).json()
    assert own["msg"] == "Комментарий удалён"


def test_blog_delete_post(client, admin_headers):
    post_id = create_blog_post(client, admin_headers)["data"]["id"]
    assert client.delete(f"/api/admin/blog/posts/{post_id}", headers=admin_headers).json()["msg"] == "Пост удалён"
    assert client.get("/api/blog/posts").json()["data"]["total"] == 0


def test_blog_image_upload(client, admin_headers, storage):
    body = client.post(
        "/api/admin/blog/images",
        files={"file": ("cover.png", PNG_BYTES, "image/png")},
        headers=admin_headers,
    ).json()
    assert body["code"] == 200
    assert body["data"]["url"].startswith("http://minio.test/blog-images/")
    assert storage.objects[f"blog-images/{body['data']['path']}"] == PNG_BYTES

    rejected = client.post(
        "/api/admin/blog/images",
        files={"file": ("notes.txt", b"text", "text/plain")},
        headers=admin_headers,
    ).json()
    assert rejected["msg"] == "Допустимы только изображения"


def test_blog_admin_routes_forbidden_for_moderator(client, moderator_headers):
    body = create_blog_post(client, moderator_headers)
    assert body["code"] == 403


# ---------- 论坛 ----------

def test_forum_post_pending_visibility(client, user_headers):
    created = client.post("/api/forum/posts", json=FORUM_POST, headers=user_headers).json()
    assert created["msg"] == "Ваш пост будет опубликован после модерации"
    post_id = created["data"]["id"]

    assert client.get("/api/forum/posts").json()["data"]["total"] == 0
    assert client.get(f"/api/forum/posts/{post_id}").json()["code"] == 404

    own = client.get("/api/forum/posts", headers=user_headers).json()["data"]
    assert own["total"] == 1
    assert own["items"][0]["author_name"] == "Иван Петров"
    assert client.get(f"/api/forum/posts/{post_id}", headers=user_headers).json()["code"] == 200


def test_forum_moderation_and_comments(client, user_headers, moderator_headers):
    post_id = client.post("/api/forum/posts", json=FORUM_POST, headers=user_headers).json()["data"]["id"]

    # 待审核的帖子不能评论
    assert client.post(
        f"/api/forum/posts/{post_id}/comments", json={"content": "Тоже интересно"}, headers=user_headers
    ).json()["code"] == 404

    queue = client.get("/api/admin/forum/posts?status=pending", headers=moderator_headers).json()["data"]
    assert [p["id"] for p in queue] == [post_id]
    status = client.put(
        f"/api/admin/forum/posts/{post_id}/status", json={"status": "approved"}, headers=moderator_headers
    ).json()
    assert status["data"]["status"] == "approved"

    comment = client.post(
        f"/api/forum/posts/{post_id}/comments", json={"content": "Тоже интересно"}, headers=moderator_headers
    ).json()
    assert comment["msg"] == "Комментарий добавлен"

    listing = client.get("/api/forum/posts").json()["data"]
    assert listing["items"][0]["comments_count"] == 1
    detail = client.get(f"/api/forum/posts/{post_id}").json()["data"]
    assert [c["author_name"] for c in detail["comments"]] == ["Модератор"]


def test_forum_status_must_be_known(client, user_headers, moderator_headers):
    post_id = client.post("/api/forum/posts", json=FORUM_POST, headers=user_headers).json()["data"]["id"]
    body = client.put(
        f"/api/admin/forum/posts/{post_id}/status", json={"status": "pending"}, headers=moderator_headers
    ).json()
    assert body["code"] == 400


def test_forum_post_validation(client, user_headers):
    body = client.post(
        "/api/forum/posts", json={"title": "Как", "content": "Коротко"}, headers=user_headers
    ).json()
    messages = {d["field"]: d["message"] for d in body["data"]["details"]}
    assert messages["title"] == "Заголовок должен содержать минимум 5 символов"
    assert messages["content"] == "Содержание должно содержать минимум 20 символов"


def test_forum_delete_post(client, user_headers, moderator_headers):
    post_id = client.post("/api/forum/posts", json=FORUM_POST, headers=user_headers).json()["data"]["id"]
    body = client.delete(f"/api/admin/forum/posts/{post_id}", headers=moderator_headers).json()
    assert body["msg"] == "Пост удалён"
    assert client.get("/api/forum/posts", headers=user_headers).json()["data"]["total"] == 0


# ---------- 用户评价 ----------

def test_testimonial_flow(client, user_headers, admin_headers):
    submitted = client.post(
        "/api/testimonials",
        json={"content": "  Очень помогли разобраться с документами  ", "rating": 4},
        headers=user_headers,
    ).json()
    assert submitted["code"] == 200
    item = submitted["data"]
    assert item["status"] == "pending"
    assert item["author_name"] == "Иван Петров"
    assert item["content"] == "Очень помогли разобраться с документами"
    assert client.get("/api/testimonials").json()["data"] == []

    admin_view = client.get("/api/admin/testimonials", headers=admin_headers).json()["data"]
    assert admin_view["counts"] == {"pending": 1, "approved": 0, "rejected": 0}

    approved = client.post(f"/api/admin/testimonials/{item['id']}/approve", headers=admin_headers).json()
    assert approved["data"]["approved_at"] is not None
    assert len(client.get("/api/testimonials").json()["data"]) == 1

    rejected = client.post(f"/api/admin/testimonials/{item['id']}/reject", headers=admin_headers).json()
    assert rejected["data"]["approved_at"] is None
    assert client.get("/api/testimonials").json()["data"] == []

    deleted = client.delete(f"/api/admin/testimonials/{item['id']}", headers=admin_headers).json()
    assert deleted["msg"] == "Отзыв удалён"


def test_testimonial_validation(client, user_headers):
    body = client.post("/api/testimonials", json={"content": "Коротко", "rating": 6}, headers=user_headers).json()
    messages = {d["field"]: d["message"] for d in body["data"]["details"]}
    assert messages["content"] == "Отзыв должен содержать минимум 20 символов"
    assert messages["rating"] == "Максимальная оценка - 5"


# ---------- 疾病条目 ----------

def add_article(db, number, title, body="", is_active=True):
    db.add(DiseaseArticle(article_number=number, title=title, body=body, is_active=is_active))
    db.commit()


def test_articles_public_listing(client, db):
    add_article(db, "10", "Болезни эндокринной системы", body="10\tТекст")
    add_article(db, "2", "Туберкулез")
    add_article(db, "3", "Отключённая", is_active=False)

    items = client.get("/api/articles").json()["data"]
    assert [a["article_number"] for a in items] == ["2", "10"]
    assert "body" not in items[0]

    assert client.get("/api/articles/3").json() == {"code": 404, "data": None, "msg": "Статья не найдена"}


def test_article_markdown_format(client, db):
    add_article(db, "13", "Болезни крови", body='1. Анемии\nсм. "Приложение" - раздел 2-3')
    plain = client.get("/api/articles/13").json()["data"]
    assert plain["body"].startswith("1. Анемии")

    rendered = client.get("/api/articles/13?format=markdown").json()["data"]
    assert rendered["format"] == "markdown"
    assert "## 1. Анемии" in rendered["body"]
    assert "«Приложение»" in rendered["body"]


def test_admin_article_crud(client, admin_headers):
    created = client.post(
        "/api/admin/articles", json={"article_number": "052", "title": "Сколиоз"}, headers=admin_headers
    ).json()
    assert created["data"]["article_number"] == "52"
    article_id = created["data"]["id"]

    invalid = client.post(
        "/api/admin/articles", json={"article_number": "90", "title": "Нет такой"}, headers=admin_headers
    ).json()
    assert invalid["data"]["details"][0]["message"] == "Номер статьи должен быть числом от 1 до 89"

    updated = client.put(
        f"/api/admin/articles/{article_id}", json={"category": "Опорно-двигательный аппарат"}, headers=admin_headers
    ).json()
    assert updated["data"]["category"] == "Опорно-двигательный аппарат"

    assert client.delete(f"/api/admin/articles/{article_id}", headers=admin_headers).json()["msg"] == "Статья отключена"
    assert client.get("/api/articles/52").json()["code"] == 404
    assert len(client.get("/api/admin/articles", headers=admin_headers).json()["data"]) == 1


def test_admin_article_import(client, db, admin_headers):
    add_article(db, "1", "Кишечные инфекции")
    raw_text = (
        "1\tКишечные инфекции, бактериальные зоонозы, другие бактериальные болезни\n"
        "а) генерализованные формы\n"
        "2\tТуберкулез органов дыхания, включая плевру и внутригрудные лимфоузлы\n"
    )
    body = client.post("/api/admin/articles/import", json={"rawText": raw_text}, headers=admin_headers).json()
    assert body["data"] == {
        "success": True,
        "totalParsed": 2,
        "updated": 1,
        "notFoundInDb": ["2"],
        "articleNumbers": ["1", "2"],
    }
    article = client.get("/api/articles/1").json()["data"]
    assert "генерализованные формы" in article["body"]


def test_admin_article_import_errors(client, admin_headers):
    missing = client.post("/api/admin/articles/import", json={}, headers=admin_headers).json()
    assert missing["msg"] == "rawText is required"

    empty = client.post("/api/admin/articles/import", json={"rawText": "просто текст"}, headers=admin_headers).json()
    assert empty["msg"] == "No articles found in text"
    assert empty["data"]["preview"] == "просто текст"


CATALOG = (
    {"article_number": "43", "title": "Гипертоническая болезнь", "description": "Стойкое повышение давления"},
    {"article_number": "66", "title": "Сколиоз", "description": "Искривление позвоночника", "category": "Опорно-двигательная"},
    {"article_number": "52", "title": "Бронхиальная астма", "description": "Хроническое воспаление бронхов"},
)


def test_diagnosis_catalog_public_listing_and_search(client, admin_headers):
    for item in CATALOG:
        assert client.post("/api/admin/diagnosis-catalog", json=item, headers=admin_headers).json()["code"] == 200

    items = client.get("/api/diagnosis-catalog").json()["data"]
    assert [item["title"] for item in items] == ["Бронхиальная астма", "Гипертоническая болезнь", "Сколиоз"]
    assert items[2]["category"] == "Опорно-двигательная"

    # 搜索不区分大小写，覆盖名称、描述和条目号
    assert [i["title"] for i in client.get("/api/diagnosis-catalog?search=АСТМА").json()["data"]] == ["Бронхиальная астма"]
    assert [i["title"] for i in client.get("/api/diagnosis-catalog?search=позвоночн").json()["data"]] == ["Сколиоз"]
    assert [i["title"] for i in client.get("/api/diagnosis-catalog?search=43").json()["data"]] == ["Гипертоническая болезнь"]


def test_diagnosis_catalog_admin_update_and_delete(client, admin_headers):
    created = client.post("/api/admin/diagnosis-catalog", json=CATALOG[0], headers=admin_headers).json()["data"]

    updated = client.put(f"/api/admin/diagnosis-catalog/{created['id']}", json={"category": "Кровообращение"},
                         headers=admin_headers).json()
    assert updated["data"]["category"] == "Кровообращение"
    assert updated["data"]["title"] == "Гипертоническая болезнь"

    blank = client.put(f"/api/admin/diagnosis-catalog/{created['id']}", json={"title": " "},
                       headers=admin_headers).json()
    assert blank["code"] == 400

    assert client.delete(f"/api/admin/diagnosis-catalog/{created['id']}", headers=admin_headers).json()["code"] == 200
    missing = client.delete(f"/api/admin/diagnosis-catalog/{created['id']}", headers=admin_headers).json()
    assert missing == {"code": 404, "data": None, "msg": "Диагноз не найден"}
    assert client.get("/api/diagnosis-catalog").json()["data"] == []


def test_diagnosis_catalog_admin_only(client, user_headers):
    body = client.post("/api/admin/diagnosis-catalog", json=CATALOG[0], headers=user_headers).json()
    assert body["code"] == 403
    assert client.get("/api/diagnosis-catalog", headers=user_headers).json()["code"] == 200
