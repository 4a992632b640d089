"""
测试解析类工具：条目切分、模型回复JSON提取、SSE增量、存储路径、限流
"""
import json
import time

from nepriziv.infrastructure.external_apis import extract_json_object, message_content, parse_stream_delta
from nepriziv.infrastructure.rate_limit import FixedWindowRateLimiter
from nepriziv.infrastructure.storage.object_storage import build_object_name, extract_file_path, file_extension
from nepriziv.infrastructure.string_utils.article_parser import parse_articles
from nepriziv.services.ai.consultation_service import StreamTextCollector
from nepriziv.utils.snowflake_id import SnowflakeIDGenerator

SCHEDULE_TEXT = (
    "РАСПИСАНИЕ БОЛЕЗНЕЙ\n"
    "1\n"
    "\n"
    "Кишечные инфекции, бактериальные зоонозы, другие бактериальные болезни\n"
    "а) генерализованные формы\n"
    "5\n"
    "А Б В\n"
    "2\tТуберкулез органов дыхания, включая плевру и внутригрудные лимфоузлы\n"
    "а) активный туберкулез органов дыхания\n"
    "1\n"
    "Повторная ссылка на первую статью с достаточно длинным названием\n"
)


def test_parse_articles_bare_number_and_tab_forms():
    articles = parse_articles(SCHEDULE_TEXT)
    assert [a.number for a in articles] == ["1", "2"]
    assert articles[0].body.startswith("1\n")
    assert "генерализованные формы" in articles[0].body
    # "5" перед строкой категорий не является началом статьи
    assert "А Б В" in articles[0].body
    assert articles[1].body.startswith("2\tТуберкулез")


def test_parse_articles_first_occurrence_wins():
    articles = parse_articles(SCHEDULE_TEXT)
    assert "Повторная ссылка" in articles[1].body


def test_parse_articles_drops_short_bodies_and_empty_text():
    assert parse_articles("") == []
    assert parse_articles("7\tКороткое название статьи!!") == []


def test_parse_articles_strips_zero_width_chars():
    text = "3\tВирусный гепатит\u200b и другие заболевания печени\nтекст"
    articles = parse_articles(text)
    assert len(articles) == 1
    assert "\u200b" not in articles[0].body


def test_extract_json_object_from_fenced_reply():
    reply = 'Вот ответ:\n```json\n{"category": "В", "article": "43", "explanation": "ок"}\n```'
    assert extract_json_object(reply) == {"category": "В", "article": "43", "explanation": "ок"}


def test_extract_json_object_repairs_trailing_comma():
    assert extract_json_object('{"category": "А",}') == {"category": "А"}


def test_extract_json_object_rejects_non_objects():
    assert extract_json_object(None) is None
    assert extract_json_object("") is None


def test_message_content():
    assert message_content({"choices": [{"message": {"content": "привет"}}]}) == "привет"
    assert message_content({"choices": []}) == ""
    assert message_content({}) == ""


def test_parse_stream_delta():
    line = "data: " + json.dumps({"choices": [{"delta": {"content": "Да"}}]})
    assert parse_stream_delta(line) == "Да"
    assert parse_stream_delta("data: [DONE]") is None
    assert parse_stream_delta(": keep-alive") is None
    assert parse_stream_delta("data: {broken") is None


def test_stream_collector_handles_split_lines_and_characters():
    payload = (
        "data: " + json.dumps({"choices": [{"delta": {"content": "Призыв"}}]}, ensure_ascii=False) + "\n\n"
        + "data: " + json.dumps({"choices": [{"delta": {"content": "ник"}}]}, ensure_ascii=False) + "\n\n"
        + "data: [DONE]\n\n"
    ).encode("utf-8")
    collector = StreamTextCollector()
    # режем посередине многобайтового символа
    split = payload.index("П".encode("utf-8")) + 1
    collector.feed(payload[:split])
    collector.feed(payload[split:split + 30])
    collector.feed(payload[split + 30:])
    collector.close()
    assert collector.text == "Призывник"


def test_stream_collector_flushes_last_line_on_close():
    collector = StreamTextCollector()
    collector.feed(b'data: {"choices": [{"delta": {"content": "end"}}]}')
    assert collector.text == ""
    collector.close()
    assert collector.text == "end"


def test_build_object_name():
    assert build_object_name(42, "scan.PDF", 1700000000000) == "42/1700000000000.pdf"
    assert build_object_name(42, "noext", 5) == "42/5"
    assert file_extension("a.b.JPEG") == "jpeg"


def test_extract_file_path_from_legacy_urls():
    bucket = "medical-documents"
    assert extract_file_path("7/1.pdf", bucket) == "7/1.pdf"
    public = "https://x.supabase.co/storage/v1/object/public/medical-documents/7/1.pdf"
    assert extract_file_path(public, bucket) == "7/1.pdf"
    signed = "https://x.supabase.co/storage/v1/object/sign/medical-documents/7/1.pdf?token=abc"
    assert extract_file_path(signed, bucket) == "7/1.pdf"
    minio = "http://minio.local:9000/medical-documents/7/2.png"
    assert extract_file_path(minio, bucket) == "7/2.png"


def test_rate_limiter_window():
    limiter = FixedWindowRateLimiter(window_seconds=300, max_requests=1)
    assert limiter.hit("1.1.1.1").allowed
    blocked = limiter.hit("1.1.1.1")
    assert not blocked.allowed
    assert blocked.retry_after_minutes == 5
    assert limiter.hit("2.2.2.2").allowed


def test_rate_limiter_window_expires():
    limiter = FixedWindowRateLimiter(window_seconds=1, max_requests=1)
    assert limiter.hit("ip").allowed
    assert not limiter.hit("ip").allowed
    time.sleep(1.1)
    assert limiter.hit("ip").allowed


def test_rate_limiter_counts_every_attempt():
    limiter = FixedWindowRateLimiter(window_seconds=60, max_requests=2)
    assert limiter.hit("ip").allowed
    assert limiter.hit("ip").allowed
    assert not limiter.hit("ip").allowed
    limiter.reset()
    assert limiter.hit("ip").allowed


def test_snowflake_ids_increase():
    generator = SnowflakeIDGenerator(worker_id=3)
    ids = [generator.next_id() for _ in range(1000)]
    assert ids == sorted(set(ids))
    assert (ids[0] >> 12) & 0x3FF == 3
