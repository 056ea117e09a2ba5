"""
Text format for matrices.

A matrix is written as bracketed rows separated by a newline and a space:

    [[1, 2, 3]
     [4, 5, 6]]

Elements of numeric matrices are written as-is. Elements of any other
matrix are quoted, and the characters that would break the layout
(newline, carriage return, tab, form feed, backslash, comma and space)
are backslash-escaped inside the quotes.
"""

from typing import Any, Callable, Dict, Optional

from .errors import MatrixParseError

ROW_SEPARATOR = "\n "
ITEM_SEPARATOR = ", "

_ESCAPES = {"\n": "n", "\r": "r", "\t": "t", "\f": "f", "\\": "\\", ",": ",", " ": " "}
_UNESCAPES = {"n": "\n", "r": "\r", "t": "\t", "f": "\f"}


class ParseRule:
    """Per-type conversion functions with an optional fallback."""
    default_rule: Optional[Callable] = None

    def __init__(self):
        self.rules: Dict[type, Callable] = {}

    def __getitem__(self, element_type: type) -> Callable:
        if element_type in self.rules:
            return self.rules[element_type]
        if self.default_rule is not None:
            return self.default_rule
        raise KeyError(f"Parse rule for type '{element_type.__name__}' not found.")

    def __contains__(self, element_type: type) -> bool:
        return element_type in self.rules

    def add(self, element_type: type, func: Callable) -> 'ParseRule':
        self.rules[element_type] = func
        return self

    def copy(self) -> 'ParseRule':
        other = type(self)()
        other.rules = dict(self.rules)
        other.default_rule = self.default_rule
        return other


class ParseToString(ParseRule):
    """Formatting rules keyed by the runtime type of each element; falls back to str()."""
    def __init__(self):
        super().__init__()
        self.default_rule = str


class ParseFromString(ParseRule):
    """Parsing rules keyed by the element type being produced; strings parse to themselves."""
    def __init__(self):
        super().__init__()
        self.default_rule = lambda _text: None
        self.add(str, lambda text: text)


def escape(text: str) -> str:
    return "".join("\\" + _ESCAPES[ch] if ch in _ESCAPES else ch for ch in text)


def unescape(text: str) -> str:
    chars = iter(text)
    out = []
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        escaped = next(chars, None)
        # A trailing lone backslash is dropped
        if escaped is not None:
            out.append(_UNESCAPES.get(escaped, escaped))
    return "".join(out)


def _strip(text: str, head: str, tail: str) -> str:
    if len(text) < 2 or text[0] != head or text[-1] != tail:
        raise ValueError(f"Expected text enclosed in {head}{tail}: {text!r}")
    return text[1:-1]


def matrix_to_string(matrix, rule: Optional[ParseToString] = None) -> str:
    """Formats a matrix in the bracketed-row layout."""
    if rule is None:
        rule = ParseToString()
    numeric = matrix.is_numeric()

    rows = [[] for _ in range(matrix.rows)]

    def write(value: Any, i: int, _j: int):
        text = rule[type(value)](value)
        rows[i].append(text if numeric else f'"{escape(text)}"')

    matrix.iterate_with_position(write)
    body = ROW_SEPARATOR.join("[" + ITEM_SEPARATOR.join(row) + "]" for row in rows)
    return f"[{body}]"


def matrix_from_string(text: str, cls=None, rule: Optional[ParseFromString] = None,
                       element_type: Optional[type] = None):
    """
    Parses the bracketed-row layout into a new matrix.

    Args:
        text: Matrix text
        cls: Matrix class to build (defaults to the generic Matrix)
        rule: Parsing rules; numeric classes get their element parser added
        element_type: Type each element parses to (defaults to the class trait)

    Raises:
        MatrixParseError: if the text is malformed or an element fails to parse
    """
    if cls is None:
        from .core import Matrix
        cls = Matrix
    if element_type is None:
        element_type = cls.element_type

    rule = ParseFromString() if rule is None else rule.copy()
    if cls.numeric and element_type not in rule:
        rule.add(element_type, element_type)
    parse = rule[element_type]

    def parse_item(item: str):
        if cls.numeric:
            return parse(item)
        return parse(unescape(_strip(item, '"', '"')))

    try:
        body = _strip(text, "[", "]")
        rows = [
            [parse_item(item) for item in _strip(row, "[", "]").split(ITEM_SEPARATOR)]
            for row in body.split(ROW_SEPARATOR)
        ]
    except (ValueError, TypeError, KeyError) as exc:
        raise MatrixParseError("Matrix string is not valid.") from exc

    if any(len(row) != len(rows[0]) for row in rows):
        raise MatrixParseError("Matrix string is not valid: rows differ in length.")
    return cls(rows)
