"""URL-encoded parameters: query strings and form bodies."""

from collections.abc import Iterable
from urllib.parse import parse_qsl

from wren.http.multidict import MultiDict


class QueryParams(MultiDict):
    """Parsed ``a=1&b=2`` data that remembers its raw bytes."""

    __slots__ = ("_raw",)

    def __init__(self, pairs: Iterable[tuple[str, str]] = (), raw: bytes = b"") -> None:
        super().__init__(pairs)
        self._raw = raw

    @classmethod
    def parse(cls, raw: bytes, encoding: str = "latin-1") -> "QueryParams":
        """Parse *raw*, keeping blank values (``?flag=`` yields ``""``)."""
        return cls(parse_qsl(raw.decode(encoding), keep_blank_values=True), raw)

    @property
    def raw(self) -> bytes:
        return self._raw

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """First value of *key* as an int, or *default* when missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default
