"""
把疾病表（从官方DOCX提取的纯文本）按条款切分
"""

import re
from dataclasses import dataclass
from typing import List

from .str_clean import collapse_blank_lines, normalize_newlines, replace_zero_width_chars

MIN_ARTICLE = 1
MAX_ARTICLE = 89
# how many lines after a bare number may hold the article title
TITLE_LOOKAHEAD = 4

_NUMBER_ONLY = re.compile(r"^(\d{1,2})$")
_NUMBER_TAB_TITLE = re.compile(r"^(\d{1,2})\t(.{20,})")
_CATEGORY_LETTERS = re.compile(r"^[АБВГД\s]+$")
_COLUMN_HEADER = re.compile(r"^графа", re.IGNORECASE)


@dataclass
class ParsedArticle:
    number: str
    body: str


@dataclass
class _Start:
    number: int
    offset: int


def _looks_like_title(line: str) -> bool:
    return len(line) > 20 and not _CATEGORY_LETTERS.match(line) and not _COLUMN_HEADER.match(line)


def _next_non_empty(lines: List[str], index: int) -> str:
    for candidate in lines[index + 1:index + 1 + TITLE_LOOKAHEAD]:
        if candidate.strip():
            return candidate.strip()
    return ""


def _find_starts(lines: List[str]) -> List[_Start]:
    starts: List[_Start] = []
    offset = 0

    def add(number: int):
        if starts and starts[-1].number == number:
            return
        starts.append(_Start(number=number, offset=offset))

    for i, raw in enumerate(lines):
        line = raw.strip()
        if line:
            match = _NUMBER_ONLY.match(line)
            if match:
                number = int(match.group(1))
                if MIN_ARTICLE <= number <= MAX_ARTICLE and _looks_like_title(_next_non_empty(lines, i)):
                    add(number)

            match = _NUMBER_TAB_TITLE.match(line)
            if match:
                number = int(match.group(1))
                if MIN_ARTICLE <= number <= MAX_ARTICLE:
                    add(number)

        offset += len(raw) + 1

    return starts


def parse_articles(text: str) -> List[ParsedArticle]:
    """
    Article starts are either a bare 1..89 line followed by a title line, or
    ``N<TAB>title``. The first occurrence of each number wins; the body runs
    to the next start. Bodies of 30 characters or fewer are dropped.
    """
    if not text:
        return []
    text = replace_zero_width_chars(text)

    starts = sorted(_find_starts(text.split("\n")), key=lambda s: s.offset)

    seen = set()
    unique: List[_Start] = []
    for start in starts:
        if start.number in seen:
            continue
        seen.add(start.number)
        unique.append(start)

    articles: List[ParsedArticle] = []
    for i, start in enumerate(unique):
        end = unique[i + 1].offset if i + 1 < len(unique) else len(text)
        body = text[start.offset:end].strip()
        body = collapse_blank_lines(normalize_newlines(body)).strip()
        if len(body) > 30:
            articles.append(ParsedArticle(number=str(start.number), body=body))

    return articles
