"""
Document Dumping

Re-emits a parsed value tree as beautified document text, the way the
``dump`` command shows a downloaded result. Object keys are sorted, and
arrays of plain non-negative integers are kept on one line (wrapping every
21 items) because the Nu data contains many long id lists.

The output is accepted by ``parse_document`` again, so for trees without
floating point edge cases ``parse_document(dump(v)) == v``.
"""

from typing import Any, List

INDENT = "    "
SHORT_LIST_WRAP = 20

_QUOTES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def quote_string(text: str) -> str:
    """Quote a string with the escapes the parser understands."""
    return '"' + "".join(_QUOTES.get(ch, ch) for ch in text) + '"'


def format_number(value) -> str:
    """Format a number without exponent notation."""
    if isinstance(value, float):
        text = repr(value)
        if "e" in text or "E" in text:
            text = format(value, "f")
        return text
    return str(value)


def _is_short_item(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _dump(value: Any, prefix: str, out: List[str]) -> None:
    indent = prefix + INDENT

    if isinstance(value, list):
        if not value:
            out.append("[]")
        elif not all(_is_short_item(item) for item in value):
            # Full form
            out.append("[\n" + indent)
            for i, item in enumerate(value):
                if i:
                    out.append(",\n" + indent)
                _dump(item, indent, out)
            out.append("\n" + prefix + "]")
        else:
            # Short form
            out.append("[")
            column = 0
            for item in value:
                if column > SHORT_LIST_WRAP:
                    out.append(",\n" + indent)
                    column = 1
                else:
                    if column:
                        out.append(",")
                    column += 1
                out.append(str(item))
            out.append("]")
    elif isinstance(value, dict):
        out.append("{")
        for i, key in enumerate(sorted(value)):
            if i:
                out.append(",")
            out.append("\n" + indent + quote_string(key) + ": ")
            _dump(value[key], indent, out)
        if value:
            out.append("\n" + prefix)
        out.append("}")
    elif value is None:
        out.append("null")
    elif isinstance(value, bool):
        out.append("true" if value else "false")
    elif isinstance(value, (int, float)):
        out.append(format_number(value))
    else:
        out.append(quote_string(str(value)))


def dump(value: Any) -> str:
    """Dump a value tree as beautified document text."""
    out: List[str] = []
    _dump(value, "", out)
    return "".join(out)
