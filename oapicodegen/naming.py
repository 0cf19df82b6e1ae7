"""Identifier, comment and URI helpers used when naming generated Go code."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Mapping
from urllib.parse import quote_plus

_PATH_PARAM_RE = re.compile(r"\{[.;?]?([^{}*]+)\*?\}")

_GO_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer",
        "else", "fallthrough", "for", "func", "go", "goto", "if", "import",
        "interface", "map", "package", "range", "return", "select", "struct",
        "switch", "type", "var",
    }
)

_PREDECLARED_IDENTIFIERS = frozenset(
    {
        # Types
        "bool", "byte", "complex64", "complex128", "error", "float32",
        "float64", "int", "int8", "int16", "int32", "int64", "rune", "string",
        "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
        # Constants
        "true", "false", "iota",
        # Zero value
        "nil",
        # Functions
        "append", "cap", "close", "complex", "copy", "delete", "imag", "len",
        "make", "new", "panic", "print", "println", "real", "recover",
    }
)

_SEPARATORS = frozenset("-#@!$&=.+:;_~ (){}[]")

_PREFIX_WORDS = {
    "-": "Minus",
    "+": "Plus",
    "&": "And",
    "|": "Or",
    "~": "Tilde",
    "=": "Equal",
    "#": "Hash",
    ".": "Dot",
    "*": "Asterisk",
    "^": "Caret",
    "%": "Percent",
}


def _upper_rune(ch: str) -> str:
    upper = ch.upper()
    return upper if len(upper) == 1 else ch


def _lower_rune(ch: str) -> str:
    lower = ch.lower()
    return lower if len(lower) == 1 else ch


def _is_letter(ch: str) -> bool:
    return unicodedata.category(ch).startswith("L")


def _is_number(ch: str) -> bool:
    return unicodedata.category(ch).startswith("N")


def uppercase_first_character(text: str) -> str:
    """Upper-case the first character of ``text``."""
    if not text:
        return ""
    return _upper_rune(text[0]) + text[1:]


def uppercase_first_character_with_pkg_name(text: str) -> str:
    """Upper-case the first character of an identifier, keeping a ``pkg.`` prefix."""
    if not text:
        return ""
    prefix = ""
    segments = text.split(".")
    if len(segments) == 2:
        prefix = segments[0] + "."
        text = segments[1]
    return prefix + uppercase_first_character(text)


def lowercase_first_character(text: str) -> str:
    """Lower-case the first character of ``text``."""
    if not text:
        return ""
    return _lower_rune(text[0]) + text[1:]


def to_camel_case(text: str) -> str:
    """Convert query-arg style text to CamelCase, dropping separators."""
    out = []
    cap_next = True
    for ch in text.strip(" "):
        if ch.isupper():
            out.append(ch)
        if ch.isdecimal():
            out.append(ch)
        if ch.islower():
            out.append(_upper_rune(ch) if cap_next else ch)
        cap_next = ch in _SEPARATORS
    return "".join(out)


def type_name_prefix(name: str) -> str:
    """Return a word prefix that keeps a type name valid despite leading symbols."""
    if not name:
        return "Empty"
    prefix = ""
    for ch in name:
        if ch == "$":
            if name == "$":
                return "DollarSign"
            continue
        word = _PREFIX_WORDS.get(ch)
        if word is not None:
            prefix += word
            continue
        if not prefix and ch.isdecimal():
            return "N"
        return prefix
    return prefix


def schema_name_to_type_name(name: str) -> str:
    """Convert a schema name to a valid Go type name."""
    return type_name_prefix(name) + to_camel_case(name)


def path_to_type_name(path: Iterable[str]) -> str:
    """Join path elements, each camel-cased, into a type name."""
    return "_".join(to_camel_case(part) for part in path)


def is_go_keyword(text: str) -> bool:
    """Return whether ``text`` is a Go keyword."""
    return text in _GO_KEYWORDS


def is_predeclared_go_identifier(text: str) -> bool:
    """Return whether ``text`` is a predeclared Go identifier."""
    return text in _PREDECLARED_IDENTIFIERS


def _is_valid_rune_for_go_id(index: int, ch: str) -> bool:
    if index == 0 and _is_number(ch):
        return False
    return _is_letter(ch) or ch == "_" or _is_number(ch)


def is_go_identity(text: str) -> bool:
    """Return True when ``text`` is made of identifier characters and is a keyword."""
    if not all(_is_valid_rune_for_go_id(i, ch) for i, ch in enumerate(text)):
        return False
    return is_go_keyword(text)


def is_valid_go_identity(text: str) -> bool:
    """Return whether ``text`` may name a variable, constant or type."""
    if is_go_identity(text):
        return False
    return not is_predeclared_go_identifier(text)


def sanitize_go_identity(text: str) -> str:
    """Replace illegal characters so that ``text`` is usable as an identifier."""
    sanitized = "".join(
        ch if _is_valid_rune_for_go_id(i, ch) else "_" for i, ch in enumerate(text)
    )
    if is_go_keyword(sanitized) or is_predeclared_go_identifier(sanitized):
        sanitized = "_" + sanitized
    if not is_valid_go_identity(sanitized):
        raise ValueError(f"could not sanitize identifier {text!r}")
    return sanitized


def sanitize_enum_names(enum_names: Iterable[str]) -> dict[str, str]:
    """Map sanitized, de-duplicated identifiers to the original enum values."""
    unique = list(dict.fromkeys(enum_names))
    seen: dict[str, int] = {}
    result: dict[str, str] = {}
    for name in unique:
        sanitized = sanitize_go_identity(schema_name_to_type_name(name))
        if sanitized in seen:
            result[sanitized + str(seen[sanitized])] = name
        else:
            result[sanitized] = name
        seen[sanitized] = seen.get(sanitized, 0) + 1
    return result


def _string_to_go_comment_with_prefix(text: str, prefix: str) -> str:
    if not text or not text.strip():
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = []
    for i, line in enumerate(text.split("\n")):
        marker = "//"
        if i == 0 and prefix:
            marker += " " + prefix
        lines.append(f"{marker} {line}")
    joined = "\n".join(lines)
    suffix = "\n// "
    if joined.endswith(suffix):
        joined = joined[: -len(suffix)]
    return joined


def string_to_go_comment(text: str) -> str:
    """Render a possibly multi-line string as a Go comment."""
    return _string_to_go_comment_with_prefix(text, "")


def string_with_type_name_to_go_comment(text: str, type_name: str) -> str:
    """Render a Go comment whose first line starts with ``type_name``."""
    return _string_to_go_comment_with_prefix(text, type_name)


def escape_path_elements(path: str) -> str:
    """URL-escape every path element that is not a ``{param}`` placeholder."""
    elements = [
        element
        if element.startswith("{") and element.endswith("}")
        else quote_plus(element, safe="")
        for element in path.split("/")
    ]
    return "/".join(elements)


def sorted_keys(mapping: Mapping[str, object]) -> list[str]:
    """Return the keys of ``mapping`` in sorted order."""
    return sorted(mapping)


def swagger_uri_to_echo_uri(uri: str) -> str:
    """Convert OpenAPI path parameters to Echo ``:param`` form."""
    return _PATH_PARAM_RE.sub(lambda m: ":" + m.group(1), uri)


def swagger_uri_to_fiber_uri(uri: str) -> str:
    """Convert OpenAPI path parameters to Fiber ``:param`` form."""
    return _PATH_PARAM_RE.sub(lambda m: ":" + m.group(1), uri)


def swagger_uri_to_chi_uri(uri: str) -> str:
    """Convert OpenAPI path parameters to Chi ``{param}`` form."""
    return _PATH_PARAM_RE.sub(lambda m: "{" + m.group(1) + "}", uri)


def swagger_uri_to_gin_uri(uri: str) -> str:
    """Convert OpenAPI path parameters to Gin ``:param`` form."""
    return _PATH_PARAM_RE.sub(lambda m: ":" + m.group(1), uri)


def swagger_uri_to_gorilla_uri(uri: str) -> str:
    """Convert OpenAPI path parameters to Gorilla ``{param}`` form."""
    return _PATH_PARAM_RE.sub(lambda m: "{" + m.group(1) + "}", uri)


def ordered_params_from_uri(uri: str) -> list[str]:
    """Return the path parameter names of ``uri`` in order of appearance."""
    return [m.group(1) for m in _PATH_PARAM_RE.finditer(uri)]


def replace_path_params_with_str(uri: str) -> str:
    """Replace every path parameter with ``%s``."""
    return _PATH_PARAM_RE.sub(lambda m: "%s", uri)