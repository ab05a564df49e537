"""Post-processing of restored translations.

Runs after placeholder restoration and before writing. Fenced and inline code
are never modified; link localization only touches links outside code and
``link:`` keys inside the frontmatter.
"""

import logging
import re
from pathlib import PurePosixPath
from typing import Callable, List, Optional, Tuple

from ...languages import SUPPORTED_LANGUAGES
from ..protection.markdown import FENCED_CODE, FRONTMATTER, INLINE_CODE
from .models import PostProcessingPolicy

logger = logging.getLogger(__name__)

# Full-width punctuation that must not be surrounded by spaces
CJK_PUNCTUATION = {
    "zh": "，。！？；：",
    "zh-cn": "，。！？；：",
    "ja": "。、！？",
}

_INTERNAL_LINK = re.compile(
    r"(?P<label>!?\[[^\]]*\])\(/(?P<path>(?!/)[^)\s]*)(?P<title>[^)]*)\)"
)

_FRONTMATTER_LINK = re.compile(
    r"^(?P<prefix>[ \t]*(?:-[ \t]+)?link:[ \t]*[\"']?)/(?P<path>(?!/)[^\s\"']*)",
    re.MULTILINE,
)

# Root-relative targets with these suffixes are pages, everything else is an asset
_PAGE_SUFFIXES = {"", ".md", ".html"}


class ContentPostProcessor:
    """Applies language-specific fixes to restored markdown."""

    def __init__(self, policy: Optional[PostProcessingPolicy] = None):
        self.policy = policy or PostProcessingPolicy()

    def process(self, content: str, language: str) -> str:
        """Apply the enabled fixes for ``language``."""
        language = language.lower()
        if self.policy.fix_punctuation and language in CJK_PUNCTUATION:
            content = self.fix_punctuation(content, language)
        if self.policy.localize_links:
            content = self.localize_links(content, language)
        return content

    def fix_punctuation(self, content: str, language: str) -> str:
        """Remove spaces and tabs around full-width punctuation."""
        marks = CJK_PUNCTUATION.get(language.lower())
        if not marks:
            return content
        before = re.compile(rf"[ \t]+([{marks}])")
        after = re.compile(rf"([{marks}])[ \t]+")

        def fix(prose: str) -> str:
            return after.sub(r"\1", before.sub(r"\1", prose))

        return _map_prose(content, fix)

    def localize_links(self, content: str, language: str) -> str:
        """Prefix root-relative page links with ``/<language>``."""

        def link(match: "re.Match[str]") -> str:
            if match.group("label").startswith("!"):
                return match.group(0)
            path = match.group("path")
            if not _is_localizable(path, language):
                return match.group(0)
            return f"{match.group('label')}(/{language}/{path}{match.group('title')})"

        def frontmatter_link(match: "re.Match[str]") -> str:
            path = match.group("path")
            if not _is_localizable(path, language):
                return match.group(0)
            return f"{match.group('prefix')}/{language}/{path}"

        frontmatter = FRONTMATTER.match(content)
        head = ""
        if frontmatter:
            head = _FRONTMATTER_LINK.sub(frontmatter_link, frontmatter.group(0))
            content = content[frontmatter.end():]

        return head + _map_prose(content, lambda prose: _INTERNAL_LINK.sub(link, prose))


def _is_localizable(path: str, language: str) -> bool:
    if not path or path.startswith("#"):
        return False
    first = path.split("/", 1)[0].split("#", 1)[0]
    if first == language or first in SUPPORTED_LANGUAGES:
        return False
    page = path.split("#", 1)[0].split("?", 1)[0]
    return PurePosixPath(page).suffix.lower() in _PAGE_SUFFIXES


def _code_spans(text: str) -> List[Tuple[int, int]]:
    """Regions holding fenced or inline code, in order."""
    spans = [(m.start(), m.end()) for m in FENCED_CODE.finditer(text)]
    cursor = 0
    inline: List[Tuple[int, int]] = []
    for start, end in spans + [(len(text), len(text))]:
        inline.extend((m.start(), m.end()) for m in INLINE_CODE.finditer(text, cursor, start))
        cursor = end
    return sorted(spans + inline)


def _map_prose(text: str, fn: Callable[[str], str]) -> str:
    """Apply ``fn`` to every region of ``text`` that is not code."""
    pieces = []
    cursor = 0
    for start, end in _code_spans(text):
        pieces.append(fn(text[cursor:start]))
        pieces.append(text[start:end])
        cursor = end
    pieces.append(fn(text[cursor:]))
    return "".join(pieces)
