from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup, Comment

_SHORTCODE_RE = re.compile(r"\[(?:image|recenzja)\b[^\]]*\]", re.IGNORECASE)
_BLOCK_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "div", "blockquote", "tr"]


def html_to_plain_text(markup: Optional[str]) -> str:
    """
    Plain text of a legacy HTML document, e.g. for listing descriptions.

    Comments, scripts and media shortcodes are removed; block boundaries and
    ``<br>`` become whitespace; all whitespace runs collapse to one space.
    """
    if not markup:
        return ""
    soup = BeautifulSoup(_SHORTCODE_RE.sub("", markup), "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for bad in soup.find_all(["script", "style"]):
        bad.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(_BLOCK_TAGS):
        block.append("\n")

    text = soup.get_text().replace("\xa0", " ")
    return re.sub(r"\s+", " ", text).strip()
