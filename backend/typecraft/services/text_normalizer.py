"""Text normalizer: turns raw pasted or extracted text into practice text.

Every character left in the output is one a typist can produce from a
keyboard, and paragraphs survive as single blank lines. ``normalize`` is
total (never raises) and idempotent.
"""

import re
import unicodedata

# Zero-width space/non-joiner/joiner, word joiner, BOM, soft hyphen. A soft
# hyphen right after "Ã" is half of a mis-encoded "í" and is left for repair.
_INVISIBLE_RE = re.compile(
    "[" + "".join(map(chr, (0x200B, 0x200C, 0x200D, 0x2060, 0xFEFF))) + "]"
    "|(?<!\N{LATIN CAPITAL LETTER A WITH TILDE})\N{SOFT HYPHEN}"
)

# UTF-8 bytes that were decoded as Latin-1/cp1252 somewhere upstream.
_MOJIBAKE = {
    "Ã©": "é", "Ã¨": "è", "Ãª": "ê", "Ã«": "ë",
    "Ã\N{NO-BREAK SPACE}": "à", "Ã¢": "â", "Ã¤": "ä", "Ã¡": "á",
    "Ã®": "î", "Ã¯": "ï", "Ã\N{SOFT HYPHEN}": "í",
    "Ã´": "ô", "Ã¶": "ö", "Ã³": "ó",
    "Ã¹": "ù", "Ã»": "û", "Ã¼": "ü", "Ãº": "ú",
    "Ã§": "ç", "Ã±": "ñ", "Å“": "œ",
    "Ã‰": "É", "Ãˆ": "È", "ÃŠ": "Ê", "Ã€": "À",
    "Ã‡": "Ç", "Ã”": "Ô", "Ãœ": "Ü",
    "â€™": "’", "â€˜": "‘",
    "â€œ": "“", "â€\u009d": "”",
    "â€“": "–", "â€”": "—",
    "â€¦": "…", "Â«": "«", "Â»": "»",
    "Â\N{NO-BREAK SPACE}": "\N{NO-BREAK SPACE}",
}
# Longest sequences first so a three-character sequence wins over its prefix.
_MOJIBAKE_RE = re.compile(
    "|".join(re.escape(k) for k in sorted(_MOJIBAKE, key=len, reverse=True))
)

# pdftotext sometimes emits the accent as a separate spacing character
# before the letter it belongs to.
_SPACING_ACCENTS = {
    "\N{ACUTE ACCENT}": "\N{COMBINING ACUTE ACCENT}",
    "\N{DIAERESIS}": "\N{COMBINING DIAERESIS}",
    "\N{MODIFIER LETTER CIRCUMFLEX ACCENT}": "\N{COMBINING CIRCUMFLEX ACCENT}",
    "\N{SMALL TILDE}": "\N{COMBINING TILDE}",
    "\N{CEDILLA}": "\N{COMBINING CEDILLA}",
}
_SPACING_ACCENT_RE = re.compile(
    "([" + "".join(_SPACING_ACCENTS) + "])([A-Za-z])"
)

_PUNCTUATION = str.maketrans({
    "‘": "'", "’": "'", "‚": "'", "‛": "'", "′": "'",
    "“": '"', "”": '"', "„": '"', "‟": '"', "″": '"',
    "«": '"', "»": '"',
    "‐": "-", "‑": "-", "‒": "-", "–": "-", "—": "-",
    "―": "-", "−": "-",
    "…": "...",
    "ﬀ": "ff", "ﬁ": "fi", "ﬂ": "fl", "ﬃ": "ffi", "ﬄ": "ffl",
    "\t": " ",
    # no-break, en/em and other fixed-width spaces, ideographic space
    **{chr(cp): " " for cp in (0x00A0, *range(0x2000, 0x200B), 0x202F, 0x205F, 0x3000)},
    "\N{LINE SEPARATOR}": "\n",
    "\N{PARAGRAPH SEPARATOR}": "\n",
})

_SPACES_RE = re.compile(r" {2,}")
_HYPHEN_BREAK_RE = re.compile(r"(?<=[a-zà-öø-ÿ])-\n(?=[a-zà-öø-ÿ])")
_BLANK_LINES_RE = re.compile(r"\n{3,}")

# Repairs can expose further repairs (double-encoded text); bound the loop.
_MAX_REPAIR_PASSES = 8


def _compose_accent(match: "re.Match[str]") -> str:
    accent, letter = match.group(1), match.group(2)
    composed = unicodedata.normalize("NFC", letter + _SPACING_ACCENTS[accent])
    return composed if len(composed) == 1 else match.group(0)


def _repair_encoding(text: str) -> str:
    for _ in range(_MAX_REPAIR_PASSES):
        repaired = unicodedata.normalize("NFC", text)
        repaired = _MOJIBAKE_RE.sub(lambda m: _MOJIBAKE[m.group(0)], repaired)
        repaired = _SPACING_ACCENT_RE.sub(_compose_accent, repaired)
        repaired = unicodedata.normalize("NFC", repaired)
        if repaired == text:
            break
        text = repaired
    return text


def normalize(raw: str) -> str:
    """Clean *raw* into keyboard-typable text.

    Steps: drop invisible characters and unify line endings, repair
    mis-encoded accents, NFC, map typographic punctuation to ASCII, then
    tidy whitespace (collapse spaces, trim lines, re-join hyphenated line
    breaks, keep at most one blank line, trim).
    """
    if not raw:
        return ""

    text = _INVISIBLE_RE.sub("", raw)
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\f", "\n")

    text = _repair_encoding(text)
    text = text.translate(_PUNCTUATION)
    text = unicodedata.normalize("NFC", text)

    lines = [_SPACES_RE.sub(" ", line).strip() for line in text.split("\n")]
    text = "\n".join(lines)

    text = _HYPHEN_BREAK_RE.sub("", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()
