from __future__ import annotations

_QUOTE = 0x22
_BACKSLASH = 0x5C
_NAMED_ESCAPES = {0x09: b"\\t", 0x0A: b"\\n", 0x0D: b"\\r"}


def sanitize_json(data: bytes) -> bytes:
    """Escape raw control bytes found inside JSON string literals.

    Upstream services sometimes echo user text verbatim, leaving literal
    newlines or NULs inside strings, which strict JSON parsers reject.
    Bytes outside string literals are copied unchanged so structural
    whitespace survives, and an existing escape sequence is copied as a
    pair so it is never escaped twice. Valid JSON comes back unchanged.
    """
    if not data:
        return b""

    out = bytearray()
    in_string = False
    escaped = False
    for b in data:
        if escaped:
            out.append(b)
            escaped = False
            continue
        if b == _BACKSLASH and in_string:
            out.append(b)
            escaped = True
            continue
        if b == _QUOTE:
            in_string = not in_string
            out.append(b)
            continue
        if in_string and b < 0x20:
            out += _NAMED_ESCAPES.get(b) or b"\\u%04x" % b
        else:
            out.append(b)
    return bytes(out)
