"""Tokenizer — split a raw input line into argument tokens.

Every command line goes through the tokenizer before dispatch.  The
grammar is deliberately small:

    - **Spaces separate tokens** — runs of unquoted spaces collapse.
    - **Quotes group words** — ``"..."`` or ``'...'`` keep their
      contents together, spaces included.  The quote characters
      themselves are dropped.
    - **The other quote is literal** — inside ``"..."`` a ``'`` is just
      a character (and vice versa), so ``"it's"`` tokenizes to ``it's``.
    - **No escapes** — a backslash is passed through verbatim.
    - **Unterminated quotes are not errors** — the rest of the line is
      taken literally, so a typo never crashes the interpreter.

The first token is the command name; the remaining tokens are its
positional arguments.
"""

_QUOTES = frozenset({'"', "'"})


def tokenize(line: str) -> list[str]:
    """Split *line* into tokens, honouring single and double quotes.

    Args:
        line: The raw input line (e.g. ``call 0xABC "set(1, 2)"``).

    Returns:
        The list of tokens, with quote characters removed.

    """
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None

    for char in line:
        if quote is None and char in _QUOTES:
            quote = char
        elif char == quote:
            quote = None
        elif char == " " and quote is None:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append("".join(current))
    return tokens


def first_word(text: str) -> str:
    """Return the first whitespace-delimited word of *text*, or ``""``."""
    parts = text.split(maxsplit=1)
    return parts[0] if parts else ""

