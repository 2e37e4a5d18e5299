"""
Plain-text helpers: title and summary derivation from markdown content,
word counts and reading time.
"""
import math
import re

from config.settings import SUMMARY_MAX_LENGTH, TITLE_MAX_LENGTH, WORDS_PER_MINUTE

ELLIPSIS = "..."

_HEADER_LINE_RE = re.compile(r"^#{1,3}\s+(.+)", re.MULTILINE)
_SENTENCE_END_RE = re.compile(r"[.!?]")

# Applied in order. Fenced blocks go first so their backticks don't pair up
# with inline code markers.
_MARKDOWN_STRIP: list[tuple[re.Pattern, str]] = [
    (re.compile(r"```[\s\S]*?```"), ""),          # fenced code blocks
    (re.compile(r"!\[(.*?)\]\(.*?\)"), ""),       # images
    (re.compile(r"#{1,6}\s+"), ""),               # header markers
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),        # bold
    (re.compile(r"\*(.*?)\*"), r"\1"),            # italic
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),     # links, keep text
    (re.compile(r"`(.*?)`"), r"\1"),              # inline code
    (re.compile(r"\n+"), " "),
]


def extract_title(content: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """
    Derive a title for a post without a title tag:
      1. the first markdown header of level 1-3
      2. the first non-blank line, if it looks like a heading
         (6 to 2*max_length-1 chars, no period)
      3. the first sentence, with an ellipsis if it had to be cut
    """
    header = _HEADER_LINE_RE.search(content)
    if header:
        return header.group(1).strip()[:max_length]

    lines = [line for line in content.split("\n") if line.strip()]
    if lines:
        first_line = lines[0].strip()
        if 5 < len(first_line) < max_length * 2 and "." not in first_line:
            return first_line[:max_length]

    first_sentence = _SENTENCE_END_RE.split(content, maxsplit=1)[0].strip()
    if len(first_sentence) > max_length:
        return first_sentence[:max_length] + ELLIPSIS
    return first_sentence


def extract_summary(content: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    """Markdown-stripped summary, cut at a late sentence boundary where possible."""
    plain = strip_markdown(content)
    if len(plain) <= max_length:
        return plain

    truncated = plain[:max_length]
    last_end = max(truncated.rfind("."), truncated.rfind("!"), truncated.rfind("?"))
    if last_end >= max_length * 0.7:
        return truncated[: last_end + 1]
    return truncated.strip() + ELLIPSIS


def strip_markdown(content: str) -> str:
    text = content
    for pattern, replacement in _MARKDOWN_STRIP:
        text = pattern.sub(replacement, text)
    return text.strip()


def count_words(text: str) -> int:
    return len(text.split())


def read_minutes(word_count: int, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    return math.ceil(word_count / words_per_minute)
