"""
Split solution text into plain text and LaTeX math segments

Solutions mark math with ``$...$`` (inline) and ``$$...$$`` (block). Block
delimiters win wherever both forms could match, so ``$$y$$`` is one block
segment, not an inline ``$`` pair around ``$y$``.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

# Alternation order gives block math precedence at every position
MATH_PATTERN = re.compile(r"\$\$([^$]+)\$\$|\$([^$]+)\$")

MARKDOWN_SPECIAL = re.compile(r"([\\`*_{}\[\]()#+\-.!|~<>$&])")
LINE_START_INDENT = re.compile(r"^[ \t]+", re.MULTILINE)
NEWLINE_INDENT = re.compile(r"(?<=\n)[ \t]+")


class SegmentKind(str, Enum):
    PLAIN = "plain"
    INLINE = "inline"
    BLOCK = "block"


@dataclass(frozen=True)
class MathSegment:
    kind: SegmentKind
    text: str


def split_math_segments(text: str) -> List[MathSegment]:
    """
    Split text into ordered plain, inline-math and block-math segments

    Math segments hold the expression without delimiters. Unmatched ``$``
    signs stay in the plain text. Whitespace is preserved.

    >>> [(s.kind.value, s.text) for s in split_math_segments("solve $x=1$ then $$y=2$$")]
    [('plain', 'solve '), ('inline', 'x=1'), ('plain', ' then '), ('block', 'y=2')]
    """
    segments: List[MathSegment] = []
    position = 0

    for match in MATH_PATTERN.finditer(text):
        if match.start() > position:
            segments.append(MathSegment(SegmentKind.PLAIN, text[position:match.start()]))

        block, inline = match.groups()
        if block is not None:
            segments.append(MathSegment(SegmentKind.BLOCK, block))
        else:
            segments.append(MathSegment(SegmentKind.INLINE, inline))
        position = match.end()

    if position < len(text):
        segments.append(MathSegment(SegmentKind.PLAIN, text[position:]))

    return segments


def escape_plain_text(text: str, at_line_start: bool = True) -> str:
    """
    Make plain text render literally inside markdown

    Markdown punctuation (including stray ``$``) is backslash-escaped, every
    newline becomes a hard line break and indentation becomes non-breaking
    spaces, so the text shows as written.

    >>> escape_plain_text("Step 1: *a*\\n  b")
    'Step 1: \\\\*a\\\\*  \\n&nbsp;&nbsp;b'
    """
    escaped = MARKDOWN_SPECIAL.sub(r"\\\1", text)
    indentation = LINE_START_INDENT if at_line_start else NEWLINE_INDENT
    escaped = indentation.sub(
        lambda match: match.group(0).replace("\t", "    ").replace(" ", "&nbsp;"),
        escaped,
    )
    return escaped.replace("\n", "  \n")


def render_blocks(segments: List[MathSegment]) -> List[Tuple[str, str]]:
    """
    Group segments for a markdown renderer

    Consecutive plain and inline segments are joined into one ``"markdown"``
    chunk with inline math re-wrapped in ``$...$`` and plain text escaped by
    ``escape_plain_text``. Each block segment becomes its own ``"latex"``
    chunk.
    """
    chunks: List[Tuple[str, str]] = []
    pending: List[str] = []

    for segment in segments:
        if segment.kind is SegmentKind.BLOCK:
            if pending:
                chunks.append(("markdown", "".join(pending)))
                pending = []
            chunks.append(("latex", segment.text))
        elif segment.kind is SegmentKind.INLINE:
            pending.append(f"${segment.text}$")
        else:
            pending.append(escape_plain_text(segment.text, at_line_start=not pending))

    if pending:
        chunks.append(("markdown", "".join(pending)))

    return chunks
