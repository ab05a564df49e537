"""Markdown protection and restoration.

Protection hides machine-readable constructs (frontmatter, code, links, HTML)
behind placeholder tokens so that only prose reaches the translator, and
restoration puts the original fragments back afterwards.

Token format: ``[#<salt>:<tag><n>#]`` where ``<tag>`` names the construct
class and ``<n>`` is the 1-based index of the fragment within that class. The
salt is empty unless the source itself contains ``[#``, in which case a
deterministic hex salt is derived from the content so that no substring of
the source can ever be read back as a token.
"""

import hashlib
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple

from ..translation.errors import ProtectionError, RestorationIntegrityError
from ..translation.models import ProtectedContent, ProtectionPolicy

logger = logging.getLogger(__name__)

TOKEN_OPEN = "[#"
TOKEN_CLOSE = "#]"
YAML_MARKER_NAME = "yaml"

# Built-in construct classes: token tag -> protected_elements key
FRONTMATTER_TAG = "f"
CODE_BLOCK_TAG = "c"
INLINE_CODE_TAG = "i"
LINK_TAG = "l"
HTML_TAG = "h"
YAML_TEXT_TAG = "y"

BUILTIN_CLASSES = {
    FRONTMATTER_TAG: "frontmatter",
    CODE_BLOCK_TAG: "code_blocks",
    INLINE_CODE_TAG: "inline_code",
    LINK_TAG: "links",
    HTML_TAG: "html_tags",
}

TRANSLATABLE_YAML_KEYS = ("title", "name", "text", "tagline", "details", "description")

FRONTMATTER = re.compile(
    r"\A---[ \t]*\r?\n.*?^---[ \t]*\r?$",
    re.DOTALL | re.MULTILINE,
)

_YAML_FIELD = re.compile(
    r"^(?P<prefix>[ \t]*(?:-[ \t]+)?(?:" + "|".join(TRANSLATABLE_YAML_KEYS) + r")[ \t]*:[ \t]*)"
    r"(?:\"(?P<dq>[^\"\n]*)\"|'(?P<sq>[^'\n]*)'|(?P<bare>[^\s\"'][^\n]*?))"
    r"(?P<suffix>(?:[ \t]+#[^\n]*?)?[ \t\r]*)$",
    re.MULTILINE,
)

# Values YAML would not read as plain prose stay opaque
_OPAQUE_YAML_VALUE = re.compile(
    r"^(?:[|>][-+0-9]*|[\[{&*!#].*|(?i:true|false|yes|no|null|~)|[-+]?\d[\d._:]*)$"
)

FENCED_CODE = re.compile(
    r"^[ \t]*(?P<fence>`{3,}|~{3,})[^\n]*\n(?:.*?\n)?[ \t]*(?P=fence)[`~]*[ \t]*\r?$",
    re.MULTILINE | re.DOTALL,
)

_CODE_BLOCK_PATTERNS = (
    FENCED_CODE,
    re.compile(r"<style\b.*?</style\s*>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<css\b.*?</css\s*>", re.IGNORECASE | re.DOTALL),
)

INLINE_CODE = re.compile(r"(?<!`)(?P<ticks>`+)[^`\n](?:[^\n]*?[^`\n])?(?P=ticks)(?!`)")

_LINK = re.compile(r"!?\[[^\]]+\]\([^)]+\)")

_HTML = re.compile(
    r"<(?:!--.*?--|/?[A-Za-z][^<>]*|![A-Za-z][^<>]*)>",
    re.DOTALL,
)

# Characters that force quoting when a translated bare YAML value contains them
_YAML_UNSAFE_START = tuple("\"'[]{}>|*&!%@`#,")


@dataclass
class _Span:
    """A consumed region of the source text."""

    start: int
    end: int
    tag: str
    element: str


class MarkdownProtector:
    """Converts markdown to and from its protected form.

    Passes run in priority order over the original text: frontmatter, fenced
    code blocks, inline code, links, HTML tags, then custom patterns. Each
    pass only sees regions no earlier pass has consumed.
    """

    def protect(
        self,
        content: str,
        policy: Optional[ProtectionPolicy] = None,
    ) -> ProtectedContent:
        """Replace protected constructs with placeholder tokens.

        Args:
            content: Raw markdown source
            policy: Which construct classes to protect (defaults to all)

        Returns:
            ProtectedContent whose ``content`` is safe to translate

        Raises:
            ProtectionError: If a protection pass fails
        """
        policy = policy or ProtectionPolicy()
        try:
            return self._protect(content, policy)
        except ProtectionError:
            raise
        except Exception as e:
            raise ProtectionError(f"Failed to protect markdown content: {e}") from e

    def _protect(self, text: str, policy: ProtectionPolicy) -> ProtectedContent:
        salt = self.choose_salt(text)
        spans: List[_Span] = []
        yaml_texts: List[str] = []
        class_names = dict(BUILTIN_CLASSES)

        if policy.protect_yaml_frontmatter:
            match = FRONTMATTER.match(text)
            if match:
                element = self._extract_yaml_texts(match.group(0), salt, yaml_texts)
                spans.append(_Span(match.start(), match.end(), FRONTMATTER_TAG, element))

        if policy.protect_code_blocks:
            for pattern in _CODE_BLOCK_PATTERNS:
                self._consume(pattern, text, spans, CODE_BLOCK_TAG)

        if policy.protect_inline_code:
            self._consume(INLINE_CODE, text, spans, INLINE_CODE_TAG)

        if policy.protect_links:
            self._consume(_LINK, text, spans, LINK_TAG)

        if policy.protect_html_tags:
            self._consume(_HTML, text, spans, HTML_TAG)

        for custom in policy.custom_patterns:
            class_names[custom.placeholder] = custom.name
            self._consume(re.compile(custom.pattern), text, spans, custom.placeholder)

        pieces: List[str] = []
        elements: Dict[str, List[str]] = {}
        element_tags: Dict[str, str] = {}
        cursor = 0
        for span in sorted(spans, key=lambda s: s.start):
            name = class_names[span.tag]
            bucket = elements.setdefault(name, [])
            bucket.append(span.element)
            element_tags[span.tag] = name
            pieces.append(text[cursor:span.start])
            pieces.append(make_token(salt, span.tag, len(bucket)))
            cursor = span.end
        pieces.append(text[cursor:])

        if yaml_texts:
            marker = make_marker(salt)
            lines = [
                f"{make_token(salt, YAML_TEXT_TAG, index)} {value}"
                for index, value in enumerate(yaml_texts, start=1)
            ]
            pieces.append("\n\n" + marker + "\n" + "\n".join(lines) + "\n" + marker)

        protected = "".join(pieces)
        logger.debug(
            f"Protected {len(spans)} fragments and {len(yaml_texts)} yaml texts (salt={salt!r})"
        )

        return ProtectedContent(
            content=protected,
            protected_elements=elements,
            element_tags=element_tags,
            yaml_texts=yaml_texts,
            original_content=text,
            token_salt=salt,
        )

    def restore(self, protected: ProtectedContent, translated_text: str) -> str:
        """Put protected fragments back into translated text.

        Args:
            protected: The ProtectedContent the translation was made from
            translated_text: Translated ``protected.content``

        Returns:
            Final markdown with original fragments and translated frontmatter

        Raises:
            RestorationIntegrityError: If any token is unknown or missing
        """
        salt = protected.token_salt
        body, translated_yaml = self._split_yaml_block(protected, translated_text)
        used = set()

        def substitute(match: "re.Match[str]") -> str:
            tag = match.group("tag").lower()
            index = int(match.group("index"))
            if tag == YAML_TEXT_TAG:
                if 1 <= index <= len(translated_yaml):
                    return translated_yaml[index - 1]
                raise RestorationIntegrityError(
                    f"Placeholder {match.group(0)} has no matching frontmatter text"
                )

            name = protected.element_tags.get(tag)
            items = protected.protected_elements.get(name, []) if name else []
            if not 1 <= index <= len(items):
                raise RestorationIntegrityError(
                    f"Placeholder {match.group(0)} has no protected counterpart"
                )
            if (tag, index) in used:
                raise RestorationIntegrityError(
                    f"Placeholder {match.group(0)} appears more than once"
                )
            used.add((tag, index))
            element = items[index - 1]
            if tag == FRONTMATTER_TAG:
                element = self._fill_frontmatter(element, protected, translated_yaml)
            return element

        restored = token_pattern(salt).sub(substitute, body)

        missing = [
            make_token(salt, tag, index)
            for tag, name in protected.element_tags.items()
            for index in range(1, len(protected.protected_elements.get(name, [])) + 1)
            if (tag, index) not in used
        ]
        if missing:
            raise RestorationIntegrityError(
                f"Translated text lost {len(missing)} placeholder(s): "
                + ", ".join(missing[:5])
                + (" ..." if len(missing) > 5 else ""),
                details={"missing": missing},
            )
        return restored

    @staticmethod
    def choose_salt(text: str) -> str:
        """Pick the shortest salt whose token prefix never occurs in ``text``."""
        if TOKEN_OPEN not in text:
            return ""
        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        while True:
            for length in range(4, len(digest) + 1):
                salt = digest[:length]
                if not _prefix_pattern(salt).search(text):
                    return salt
            digest = hashlib.sha256(digest.encode("ascii")).hexdigest()

    def _consume(
        self,
        pattern: Pattern[str],
        text: str,
        spans: List[_Span],
        tag: str,
    ) -> None:
        """Record matches of ``pattern`` that lie entirely in unconsumed regions."""
        found: List[_Span] = []
        for start, end in _free_regions(spans, len(text)):
            for match in pattern.finditer(text, start, end):
                if match.end() > match.start():
                    found.append(_Span(match.start(), match.end(), tag, match.group(0)))
        spans.extend(found)

    def _extract_yaml_texts(
        self,
        frontmatter: str,
        salt: str,
        yaml_texts: List[str],
    ) -> str:
        """Swap translatable field values for yaml tokens, collecting the values."""

        def extract(match: "re.Match[str]") -> str:
            if match.group("dq") is not None:
                value, quote = match.group("dq"), '"'
            elif match.group("sq") is not None:
                value, quote = match.group("sq"), "'"
            else:
                value, quote = match.group("bare"), ""

            if len(value.strip()) <= 1 or (not quote and _OPAQUE_YAML_VALUE.match(value)):
                return match.group(0)

            yaml_texts.append(value)
            token = make_token(salt, YAML_TEXT_TAG, len(yaml_texts))
            return f"{match.group('prefix')}{quote}{token}{quote}{match.group('suffix')}"

        return _YAML_FIELD.sub(extract, frontmatter)

    def _split_yaml_block(
        self,
        protected: ProtectedContent,
        translated_text: str,
    ) -> Tuple[str, List[str]]:
        """Remove the trailing yaml block and return its translated entries."""
        if not protected.yaml_texts:
            return translated_text, []

        match = yaml_block_pattern(protected.token_salt).search(translated_text)
        if not match:
            raise RestorationIntegrityError("Translated text lost the frontmatter text block")

        entries: Dict[int, str] = {}
        line_pattern = re.compile(
            r"^[ \t]*" + token_pattern(protected.token_salt).pattern + r"[ \t]?(?P<text>[^\n]*)$",
            re.MULTILINE | re.IGNORECASE,
        )
        for line in line_pattern.finditer(match.group("body")):
            if line.group("tag").lower() == YAML_TEXT_TAG:
                entries[int(line.group("index"))] = line.group("text").rstrip("\r")

        expected = range(1, len(protected.yaml_texts) + 1)
        missing = [index for index in expected if index not in entries]
        if missing:
            raise RestorationIntegrityError(
                f"Translated text lost {len(missing)} frontmatter text(s)",
                details={"missing": missing},
            )

        body = translated_text[:match.start()] + translated_text[match.end():]
        return body, [entries[index] for index in expected]

    def _fill_frontmatter(
        self,
        frontmatter: str,
        protected: ProtectedContent,
        translated_yaml: List[str],
    ) -> str:
        """Splice translated values into the stored frontmatter block."""

        def fill(match: "re.Match[str]") -> str:
            index = int(match.group("index"))
            if match.group("tag").lower() != YAML_TEXT_TAG or not 1 <= index <= len(translated_yaml):
                raise RestorationIntegrityError(
                    f"Frontmatter placeholder {match.group(0)} has no translated text"
                )
            value = translated_yaml[index - 1]
            if value == protected.yaml_texts[index - 1]:
                return value
            before = frontmatter[match.start() - 1] if match.start() else ""
            return _yaml_escape(value, before)

        return token_pattern(protected.token_salt).sub(fill, frontmatter)


def make_token(salt: str, tag: str, index: int) -> str:
    """Format a placeholder token."""
    prefix = f"{salt}:" if salt else ""
    return f"{TOKEN_OPEN}{prefix}{tag}{index}{TOKEN_CLOSE}"


def make_marker(salt: str) -> str:
    """Format the yaml block delimiter."""
    prefix = f"{salt}:" if salt else ""
    return f"{TOKEN_OPEN}{prefix}{YAML_MARKER_NAME}{TOKEN_CLOSE}"


def token_pattern(salt: str) -> Pattern[str]:
    """Regex matching placeholder tokens, tolerant of inner spacing and case."""
    prefix = re.escape(f"{salt}:") if salt else ""
    return re.compile(
        r"\[#[ \t]*" + prefix + r"(?P<tag>[a-z]+)[ \t]*(?P<index>\d+)[ \t]*#\]",
        re.IGNORECASE,
    )


def yaml_block_pattern(salt: str) -> Pattern[str]:
    """Regex matching the trailing yaml block, including its leading blank line."""
    prefix = re.escape(f"{salt}:") if salt else ""
    marker = r"\[#[ \t]*" + prefix + YAML_MARKER_NAME + r"[ \t]*#\]"
    return re.compile(
        r"\n{0,2}" + marker + r"[ \t]*\r?\n(?P<body>.*?)\n?[ \t]*" + marker,
        re.DOTALL | re.IGNORECASE,
    )


def _prefix_pattern(salt: str) -> Pattern[str]:
    return re.compile(r"\[#[ \t]*" + re.escape(f"{salt}:"), re.IGNORECASE)


def _free_regions(spans: List[_Span], length: int) -> List[Tuple[int, int]]:
    """Gaps between consumed spans."""
    regions = []
    cursor = 0
    for span in sorted(spans, key=lambda s: s.start):
        if span.start > cursor:
            regions.append((cursor, span.start))
        cursor = max(cursor, span.end)
    if cursor < length:
        regions.append((cursor, length))
    return regions


def _yaml_escape(value: str, quote: str) -> str:
    """Make a translated value safe for the quoting style it lands in."""
    if quote == '"':
        return value.replace("\\", "\\\\").replace('"', '\\"')
    if quote == "'":
        return value.replace("'", "''")
    if value.startswith(_YAML_UNSAFE_START) or ": " in value or " #" in value:
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return value
