"""Identifier derivation for operations, types and generated files.

Operation names and file paths are both built from ``path_tokens`` so the
two can never disagree about how a path placeholder is spelled.
"""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

TS_IDENTIFIER = re.compile(r"^[a-zA-Z_$][a-zA-Z0-9_$]*$")

PATH_PARAM = re.compile(r"\{(\w+)\}")

_SEPARATOR = re.compile(r"[^a-zA-Z0-9]+(.)?")


@dataclass(frozen=True)
class Identifier:
    raw: str
    pascal: str


def to_pascal_case(text: str) -> str:
    """Fold separators into an upper-cased next character and capitalize."""
    folded = _SEPARATOR.sub(lambda m: (m.group(1) or "").upper(), text)
    return capitalize_first(folded)


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def _lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def path_tokens(path: str) -> list[str]:
    """Tokenize a path template: ``/users/{userId}`` -> ``["Users", "ByUserId"]``."""
    tokens = []
    for segment in path.split("/"):
        if not segment:
            continue
        if segment.startswith("{") and segment.endswith("}"):
            tokens.append("By" + to_pascal_case(segment[1:-1]))
        else:
            tokens.append(to_pascal_case(segment))
    return [t for t in tokens if t]


def derive(method: str, path: str, declared_id: str | None = None) -> Identifier:
    """Derive the operation identifier and its PascalCase display variant.

    A declared ``operationId`` wins; otherwise the name is the lower-case
    method followed by the path tokens. Only the leading character changes
    between ``raw`` and ``pascal``.
    """
    if declared_id:
        raw = declared_id
    else:
        raw = method.lower() + "".join(path_tokens(path))
    return Identifier(raw=raw, pascal=capitalize_first(raw))


def derive_file_path(method: str, path: str) -> PurePosixPath:
    """Relative location of the generated module for an operation."""
    tokens = [_lower_first(t) for t in path_tokens(path)]
    if not tokens:
        tokens = ["index"]
    *dirs, name = tokens
    return PurePosixPath(method.lower(), *dirs, f"{name}.ts")


# Aliases every generated module declares for itself
RESERVED_TYPE_NAMES = frozenset({"PathParams", "QueryParams", "Body", "Response", "ErrorResponse", "RequestArgs"})


def type_identifier(name: str) -> str:
    """Map a component schema name onto a valid TypeScript type name.

    Names that clash with the module's own aliases get a ``Schema`` suffix.
    """
    cleaned = name
    if not TS_IDENTIFIER.match(name):
        cleaned = re.sub(r"[^a-zA-Z0-9_$]", "_", name)
        if not cleaned or cleaned[0].isdigit():
            cleaned = "_" + cleaned
    if cleaned in RESERVED_TYPE_NAMES:
        cleaned += "Schema"
    return cleaned


def path_placeholders(path: str) -> list[str]:
    return PATH_PARAM.findall(path)
