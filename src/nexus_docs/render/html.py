from __future__ import annotations

import re
from typing import Callable

import markdown
from bs4 import BeautifulSoup


_BODY_RE = re.compile(r"(?is)<body[^>]*>(.*?)</body>")
_STYLE_BLOCK_RE = re.compile(r"(?is)<style[^>]*>.*?</style>")
_SCRIPT_BLOCK_RE = re.compile(r"(?is)<script[^>]*>.*?</script>")
_LINK_TAG_RE = re.compile(r"(?is)<link[^>]*>")
_START_TAG_RE = re.compile(r"<[a-zA-Z][^>]*>")
# Applied to the text of a single start tag, never to document text.
_NOISY_ATTR_RE = re.compile(r"""(?i)\s(?:class|style|id|data-[\w.:-]+)\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'>]+)""")
_DEC_REF_RE = re.compile(r"&#(\d+);")
_HEX_REF_RE = re.compile(r"&#[xX]([0-9a-fA-F]+);")
_PUA_CHAR_RE = re.compile("[\ue000-\uf8ff\U000f0000-\U000ffffd\U00100000-\U0010fffd]")
# <p> or <p ...>, never <pre> or <param>.
_PARAGRAPH_RE = re.compile(r"(?is)<p(?:\s[^>]*)?>(.*?)</p>")
_BR_RE = re.compile(r"(?i)<br\s*/?>")
_CODE_HOSTILE_RE = re.compile(r"(?i)<a\s|<table|</?tr|</?td|</?th")
_SPAN_TAG_RE = re.compile(r"(?i)</?span[^>]*>")
_WRAPPER_TAG_RE = re.compile(r"(?i)</?(?:div|em|strong|u)>")
_ADJACENT_CODE_RE = re.compile(
    r"(?s)<pre><code>((?:(?!</code></pre>).)*?)</code></pre>\s*"
    r"<pre><code>((?:(?!</code></pre>).)*?)</code></pre>"
)

PRIVATE_USE_RANGES = (
    (0xE000, 0xF8FF),
    (0xF0000, 0xFFFFD),
    (0x100000, 0x10FFFD),
)


def is_private_use(codepoint: int) -> bool:
    return any(start <= codepoint <= end for start, end in PRIVATE_USE_RANGES)


def _until_stable(transform: Callable[[str], str], text: str) -> str:
    # A removal can splice its neighbours into new markup of the same kind.
    while True:
        out = transform(text)
        if out == text:
            return out
        text = out


def extract_body(html_text: str) -> str:
    match = _BODY_RE.search(html_text)
    return match.group(1) if match else html_text


def _strip_unsafe_tags_once(html_text: str) -> str:
    content = _STYLE_BLOCK_RE.sub("", html_text)
    content = _SCRIPT_BLOCK_RE.sub("", content)
    return _LINK_TAG_RE.sub("", content)


def strip_unsafe_tags(html_text: str) -> str:
    return _until_stable(_strip_unsafe_tags_once, html_text)


def strip_noisy_attributes(html_text: str) -> str:
    """Drop ``class``/``style``/``id``/``data-*`` from start tags only."""

    def replace(match: re.Match[str]) -> str:
        return _until_stable(lambda tag: _NOISY_ATTR_RE.sub("", tag), match.group(0))

    return _START_TAG_RE.sub(replace, html_text)


def _strip_private_use_once(html_text: str) -> str:
    def replace_dec(match: re.Match[str]) -> str:
        return "" if is_private_use(int(match.group(1))) else match.group(0)

    def replace_hex(match: re.Match[str]) -> str:
        return "" if is_private_use(int(match.group(1), 16)) else match.group(0)

    content = _DEC_REF_RE.sub(replace_dec, html_text)
    content = _HEX_REF_RE.sub(replace_hex, content)
    return _PUA_CHAR_RE.sub("", content)


def strip_private_use_chars(html_text: str) -> str:
    """Drop icon-font glyphs, both as character references and as literals."""
    return _until_stable(_strip_private_use_once, html_text)


def convert_paragraphs_with_breaks(html_text: str) -> str:
    """Turn manually line-wrapped paragraphs into ``<pre><code>`` blocks.

    Only paragraphs with at least one ``<br>`` qualify, and paragraphs holding
    links or table markup are left alone. Entities other than ``&nbsp;`` are
    kept as they are.
    """

    def replace(match: re.Match[str]) -> str:
        inner = match.group(1)
        if not _BR_RE.search(inner):
            return match.group(0)
        if _CODE_HOSTILE_RE.search(inner):
            return match.group(0)
        text = _SPAN_TAG_RE.sub("", inner)
        text = _BR_RE.sub("\n", text)
        text = text.replace("&nbsp;", " ")
        text = _WRAPPER_TAG_RE.sub("", text).strip()
        return f"<pre><code>{text}</code></pre>"

    return _PARAGRAPH_RE.sub(replace, html_text)


def merge_adjacent_code_blocks(html_text: str) -> str:
    out = html_text
    while _ADJACENT_CODE_RE.search(out):
        out = _ADJACENT_CODE_RE.sub(lambda m: f"<pre><code>{m.group(1)}\n{m.group(2)}</code></pre>", out)
    return out


def _normalize_once(html_text: str) -> str:
    content = extract_body(html_text)
    content = strip_unsafe_tags(content)
    content = strip_noisy_attributes(content)
    content = strip_private_use_chars(content)
    content = convert_paragraphs_with_breaks(content)
    content = merge_adjacent_code_blocks(content)
    return content.strip()


def sanitize_and_extract(html_text: str) -> str:
    # Later passes can expose markup an earlier pass removes (a PUA reference
    # inside "<scr&#57344;ipt>"), so the sequence runs to a fixed point.
    return _until_stable(_normalize_once, html_text or "")


def markdown_to_html(markdown_text: str) -> str:
    return markdown.markdown(markdown_text, extensions=["extra", "tables", "fenced_code"])


def html_to_text(html_text: str) -> str:
    soup = BeautifulSoup(html_text or "", "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return soup.get_text("\n", strip=True)
