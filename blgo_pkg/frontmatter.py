"""
Frontmatter extraction for blgo source files.

A source file starts with a YAML block delimited by ``---`` lines::

    ---
    title: My post
    date: 2020-01-01
    ---
    Markdown body...
"""

import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Iterator, Optional, Tuple

import yaml

from .errors import FieldTypeError, MissingFieldError, ParseError

DELIMITER = b'---'
DATE_FORMAT = '%Y-%m-%d'
DATE_RE = re.compile(r'\d{4}-\d{2}-\d{2}', re.ASCII)


class FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as plain strings."""


FrontmatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != 'tag:yaml.org,2002:timestamp']
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class Frontmatter(Mapping):
    """Read-only view over parsed frontmatter with typed accessors."""

    def __init__(self, data: Optional[dict] = None, path: Optional[str] = None):
        self._data = dict(data or {})
        self.path = path

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self):
        return f"Frontmatter({self._data!r})"

    def get_str(self, key: str) -> str:
        """Return ``key`` as a string, raising if it is absent or not a scalar."""
        if key not in self._data or self._data[key] is None:
            raise MissingFieldError(key, self.path)
        value = self._data[key]
        if isinstance(value, bool) or isinstance(value, (list, dict)):
            raise FieldTypeError(key, 'a string', value, self.path)
        if isinstance(value, str):
            return value
        # YAML types numbers on its own; titles like 2020 are still text
        return str(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        if key not in self._data or self._data[key] is None:
            return default
        value = self._data[key]
        if not isinstance(value, bool):
            raise FieldTypeError(key, 'a boolean', value, self.path)
        return value

    def get_date(self, key: str) -> Optional[date]:
        """Return ``key`` as a date, or None when the field is absent."""
        if key not in self._data or self._data[key] is None:
            return None
        value = self._data[key]
        if isinstance(value, datetime):
            raise self._bad_date(key, value)
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            raise FieldTypeError(key, 'a date', value, self.path)
        # strptime alone would accept 2020-1-5
        if not DATE_RE.fullmatch(value.strip()):
            raise self._bad_date(key, value)
        try:
            return datetime.strptime(value.strip(), DATE_FORMAT).date()
        except ValueError:
            raise self._bad_date(key, value) from None

    def _bad_date(self, key, value):
        return ParseError(f"field {key!r} is not a {DATE_FORMAT} date: {value!r}", self.path)


def _is_delimiter(line: bytes) -> bool:
    return line.rstrip(b'\r\n') == DELIMITER


def parse_frontmatter(data: bytes, path: Optional[str] = None) -> Tuple[Frontmatter, bytes]:
    """
    Split ``data`` into its frontmatter and the remaining body.

    Lines before the opening delimiter are dropped. The body is every byte
    after the closing delimiter line, untouched.

    Raises:
        ParseError: no delimiter, no closing delimiter, or invalid YAML.
    """
    lines = data.splitlines(keepends=True)
    start = None
    end = None
    for number, line in enumerate(lines):
        if not _is_delimiter(line):
            continue
        if start is None:
            start = number
        else:
            end = number
            break

    if start is None:
        raise ParseError("no frontmatter found", path)
    if end is None:
        raise ParseError("unterminated frontmatter: missing closing '---'", path)

    block = b''.join(lines[start + 1:end])
    body = b''.join(lines[end + 1:])

    try:
        loaded = yaml.load(block.decode('utf-8'), Loader=FrontmatterLoader)
    except UnicodeDecodeError as e:
        raise ParseError(f"frontmatter is not valid UTF-8: {e}", path) from e
    except yaml.YAMLError as e:
        raise ParseError(f"invalid YAML in frontmatter: {e}", path) from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ParseError("frontmatter must be a mapping of keys to values", path)

    return Frontmatter({str(k): v for k, v in loaded.items()}, path), body
