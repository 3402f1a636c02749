"""
Literal-aware comment stripping.

A two-state scanner (in code / in literal) removes ``//`` line comments and
``/* */`` block comments while leaving string and template literals intact,
so comment markers inside ``"..."``, ``'...'`` or backtick literals survive.

Known limitations: regular-expression literals are not recognised (a quote
or ``//`` inside a regex literal is treated as code), and template literals
containing nested backticks inside ``${...}`` are not tracked.
"""

QUOTES = ('"', "'", "`")


def remove_comments(code: str) -> str:
    """Return ``code`` with comments removed. Line comments keep their newline."""
    out = []
    i = 0
    n = len(code)
    quote = None

    while i < n:
        char = code[i]

        if quote is not None:
            out.append(char)
            if char == "\\" and i + 1 < n:
                out.append(code[i + 1])
                i += 2
                continue
            if char == quote:
                quote = None
            i += 1
            continue

        nxt = code[i + 1] if i + 1 < n else ""

        if char == "/" and nxt == "/":
            i += 2
            while i < n and code[i] != "\n":
                i += 1
            continue

        if char == "/" and nxt == "*":
            end = code.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue

        if char in QUOTES:
            quote = char

        out.append(char)
        i += 1

    return "".join(out)
