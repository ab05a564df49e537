"""Prompt construction for markdown translation."""

from ...languages import RTL_LANGUAGES, language_name
from .models import Message, PromptBundle

SYSTEM_PROMPT = """You are a professional technical translator for software documentation.
Translate the user's markdown from {source_language} into {target_language}.

Rules:
- Output only the translated markdown, with no commentary and no code fence around it.
- Placeholder tokens such as [#c1#] or [#3fa9:l2#] stand for code, links and markup.
  Copy every token exactly once, unchanged, and keep it in a sensible position.
- Lines of the form "<token> <text>" between two marker lines are short
  metadata strings: translate the text after the token, keep the token and
  the marker lines exactly as they are, one entry per line.
- Keep markdown structure intact: headings, lists, tables, emphasis and blank lines.
- Keep product names, API names and technical terms in their original form.
{extra_rules}"""

USER_PROMPT = """Translate the following markdown into {target_language}:

{content}"""


def build_translation_prompt(
    content: str,
    source_language: str,
    target_language: str,
    temperature: float = 0.3,
    max_tokens: int = 4096,
) -> PromptBundle:
    """Build the prompt bundle for one chunk of protected markdown."""
    extra_rules = ""
    if target_language.lower() in RTL_LANGUAGES:
        extra_rules = "- The target script is right-to-left; do not reorder tokens or markup.\n"

    variables = {
        "source_language": language_name(source_language, english=True),
        "target_language": language_name(target_language, english=True),
        "extra_rules": extra_rules,
    }

    return PromptBundle(
        messages=[
            Message(role="system", content=SYSTEM_PROMPT.format(**variables)),
            Message(role="user", content=USER_PROMPT.format(content=content, **variables)),
        ],
        temperature=temperature,
        max_tokens=max_tokens,
    )
