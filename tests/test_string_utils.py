"""
测试文本工具：排版、HTML清洗、User-Agent解析、Markdown转换
"""
from nepriziv.infrastructure.string_utils.sanitize import sanitize_html
from nepriziv.infrastructure.string_utils.typography import NBSP, enhance_typography, text_to_markdown
from nepriziv.infrastructure.string_utils.user_agent import parse_user_agent

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
EDGE_WINDOWS = CHROME_WINDOWS + " Edg/120.0"
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
CHROME_ANDROID = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Mobile Safari/537.36"
)


def test_user_agent_desktop_chrome():
    assert parse_user_agent(CHROME_WINDOWS) == {"browser": "Chrome", "os": "Windows", "device_type": "desktop"}


def test_user_agent_edge_wins_over_chrome():
    assert parse_user_agent(EDGE_WINDOWS)["browser"] == "Edge"


def test_user_agent_mobile_platforms():
    iphone = parse_user_agent(SAFARI_IPHONE)
    assert iphone["os"] == "iOS"
    assert iphone["browser"] == "Safari"
    assert iphone["device_type"] == "mobile"

    android = parse_user_agent(CHROME_ANDROID)
    assert android["os"] == "Android"
    assert android["device_type"] == "mobile"


def test_user_agent_missing():
    assert parse_user_agent(None) == {"browser": "Other", "os": "Other", "device_type": "desktop"}


def test_typography_quotes_dashes_and_ellipsis():
    result = enhance_typography('Диагноз "гипертония" - это важно...')
    assert "«гипертония»" in result
    assert " — " in result
    assert result.endswith("…")


def test_typography_numeric_range_and_number_sign():
    result = enhance_typography("статьи 10-12, см. № 5")
    assert "10–12" in result
    assert "№" + NBSP + "5" in result


def test_typography_short_words_get_nbsp():
    assert enhance_typography("жалоба в суд") == "жалоба в" + NBSP + "суд"


def test_typography_keeps_line_breaks():
    result = enhance_typography("первая   строка\nвторая")
    assert result == "первая строка\nвторая"


def test_markdown_numbered_heading_and_list():
    text = "1. Общие положения\nТекст статьи.\n1) первый пункт\n2) второй пункт"
    result = text_to_markdown(text)
    assert "## 1. Общие положения" in result
    assert "1. первый пункт" in result
    assert "2. второй пункт" in result


def test_markdown_term_with_key_phrase_is_bold_once():
    result = text_to_markdown("Первый абзац текста.\nВажно: явка обязательна.")
    assert result == "Первый абзац текста.\n\n**Важно:** явка обязательна."


def test_markdown_quoted_key_phrase_is_bold_once():
    assert text_to_markdown("См. «Примечание» ниже.") == "См. **«Примечание»** ниже."


def test_markdown_key_phrase_in_plain_text():
    result = text_to_markdown("Сроки короткие, Внимание к датам.")
    assert result == "Сроки короткие, **Внимание** к датам."


def test_markdown_already_formatted_is_unchanged():
    text = "## Заголовок\n**жирный**"
    assert text_to_markdown(text) == text


def test_sanitize_strips_scripts_and_handlers():
    html = '<p onclick="x()">Текст<script>alert(1)</script></p><a href="javascript:alert(1)">ссылка</a>'
    cleaned = sanitize_html(html)
    assert "<script" not in cleaned
    assert "onclick" not in cleaned
    assert "javascript:" not in cleaned
    assert "<p>Текст</p>" in cleaned


def test_sanitize_keeps_allowed_markup():
    html = '<h2 class="title">Заголовок</h2><img src="https://cdn.nepriziv.ru/a.png" alt="a" data-id="1">'
    cleaned = sanitize_html(html)
    assert '<h2 class="title">Заголовок</h2>' in cleaned
    assert 'src="https://cdn.nepriziv.ru/a.png"' in cleaned
    assert "data-id" not in cleaned


def test_sanitize_empty():
    assert sanitize_html("") == ""
