"""Entity identity derivation and parsing.

Two identity shapes share one path sanitization rule so that identities for
the same file share a recognisable prefix:

- line-based (entities on disk):
  ``{language}:{kind}:{name}:{sanitized_path}:{start}-{end}``
- hash-based (entities proposed by a client):
  ``{sanitized_path}-{name}-{kind}-{hash8}``

The hash is the first 8 hex characters of SHA-256 over
``path + name + kind + timestamp.isoformat()``. It is probabilistically
unique; the temporal manager detects the collisions it can see.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from codegraft.config.constants import HASH_KEY_LENGTH
from codegraft.core.errors import MalformedIdentityError
from codegraft.graph.models import LineRange

# Parser kind -> identity abbreviation
KIND_ABBREVIATIONS: dict[str, str] = {
    "function": "fn",
    "fn": "fn",
    "method": "method",
    "struct": "struct",
    "enum": "enum",
    "trait": "trait",
    "interface": "interface",
    "module": "mod",
    "mod": "mod",
    "impl": "impl",
    "macro": "macro",
    "test": "test",
    "class": "class",
    "variable": "var",
    "var": "var",
    "constant": "const",
    "const": "const",
    "type": "type",
    "type_alias": "type",
}

# Extensions the desanitizer restores when no known path matches
KNOWN_EXTENSIONS: tuple[str, ...] = (
    "rs",
    "py",
    "js",
    "jsx",
    "ts",
    "tsx",
    "go",
    "java",
    "cpp",
    "c",
    "h",
)

_HASH_RE = re.compile(rf"^[0-9a-f]{{{HASH_KEY_LENGTH}}}$")
_RANGE_RE = re.compile(r"^(\d+)-(\d+)$")


@dataclass(frozen=True, slots=True)
class LineKey:
    """Parsed line-based identity."""

    language: str
    kind: str
    name: str
    path_token: str
    line_range: LineRange


@dataclass(frozen=True, slots=True)
class HashKey:
    """Parsed hash-based identity."""

    path_token: str
    name: str
    kind: str
    hash: str


def abbreviate_kind(kind: str) -> str:
    """Map a parser kind to its identity abbreviation (unknown kinds pass through)."""
    return KIND_ABBREVIATIONS.get(kind.lower(), kind.lower())


def sanitize_path(path: str) -> str:
    """Replace path separators and dots with underscores."""
    return path.replace("/", "_").replace("\\", "_").replace(".", "_")


def desanitize_path(token: str, known_paths: Iterable[str] = ()) -> str:
    """Recover a real path from a sanitized token.

    Sanitization is lossy, so an exact match against the sanitized form of a
    known path wins. Otherwise a trailing known extension becomes ``.ext``
    and the remaining underscores become separators.
    """
    for path in known_paths:
        if sanitize_path(path) == token:
            return path

    stem, ext = token, ""
    for candidate in KNOWN_EXTENSIONS:
        suffix = f"_{candidate}"
        if token.endswith(suffix) and len(token) > len(suffix):
            stem, ext = token[: -len(suffix)], f".{candidate}"
            break
    return stem.replace("_", "/") + ext


def line_based_key(
    language: str, kind: str, name: str, path: str, start: int, end: int
) -> str:
    """Identity for an entity that exists on disk."""
    return f"{language}:{abbreviate_kind(kind)}:{name}:{sanitize_path(path)}:{start}-{end}"


def new_entity_key(path: str, name: str, kind: str, timestamp: datetime) -> str:
    """Identity for an entity proposed by a client, before it exists on disk."""
    abbrev = abbreviate_kind(kind)
    material = f"{path}{name}{kind}{timestamp.isoformat()}"
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()[:HASH_KEY_LENGTH]
    return f"{sanitize_path(path)}-{name}-{abbrev}-{digest}"


def is_line_based(identity: str) -> bool:
    return identity.count(":") >= 4


def parse_line_key(identity: str) -> LineKey:
    """Parse a line-based identity.

    Names may not contain ``:``; the path token never does.

    Raises:
        MalformedIdentityError: If the identity does not have the expected shape.
    """
    head = identity.split(":", 2)
    if len(head) != 3:
        raise MalformedIdentityError.unparseable(identity, "expected language:kind:...")
    language, kind, rest = head
    tail = rest.rsplit(":", 2)
    if len(tail) != 3:
        raise MalformedIdentityError.unparseable(identity, "expected name:path:start-end")
    name, path_token, range_text = tail
    if not (language and kind and name and path_token):
        raise MalformedIdentityError.unparseable(identity, "empty component")

    match = _RANGE_RE.match(range_text)
    if match is None:
        raise MalformedIdentityError.unparseable(identity, f"bad line range {range_text!r}")
    try:
        line_range = LineRange(int(match.group(1)), int(match.group(2)))
    except ValueError as e:
        raise MalformedIdentityError.unparseable(identity, str(e)) from e
    return LineKey(language, kind, name, path_token, line_range)


def parse_hash_key(identity: str) -> HashKey:
    """Parse a hash-based identity.

    Raises:
        MalformedIdentityError: If the identity does not have the expected shape.
    """
    parts = identity.rsplit("-", 3)
    if len(parts) != 4 or not all(parts):
        raise MalformedIdentityError.unparseable(identity, "expected path-name-kind-hash")
    path_token, name, kind, digest = parts
    if not _HASH_RE.match(digest):
        raise MalformedIdentityError.unparseable(identity, f"bad hash {digest!r}")
    return HashKey(path_token, name, kind, digest)


def parse_identity(identity: str) -> LineKey | HashKey:
    """Parse either identity shape.

    Raises:
        MalformedIdentityError: If neither shape matches.
    """
    if ":" in identity:
        return parse_line_key(identity)
    return parse_hash_key(identity)
