"""博客正文的HTML白名单清洗"""

import nh3

ALLOWED_TAGS = {
    "p", "br", "strong", "em", "u", "h1", "h2", "h3", "h4", "ul", "ol", "li",
    "a", "blockquote", "span", "div", "img", "hr", "pre", "code",
    "table", "thead", "tbody", "tr", "th", "td",
}

_COMMON_ATTRIBUTES = {"class", "style"}

ALLOWED_ATTRIBUTES = {
    "*": _COMMON_ATTRIBUTES,
    "a": {"href", "target", "rel"},
    "img": {"src", "alt"},
}


def sanitize_html(html: str) -> str:
    """
    Strip every tag and attribute outside the allow-list (no data-* attributes,
    no scripts or event handlers, only http(s)/mailto/tel URLs).
    """
    if not html:
        return ""
    return nh3.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        url_schemes={"http", "https", "mailto", "tel"},
        link_rel=None,
        strip_comments=True,
    )
