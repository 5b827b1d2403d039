"""Case-insensitive request headers."""

from collections.abc import Iterable

from wren.http.multidict import MultiDict


class Headers(MultiDict):
    """Request headers. Names are compared lowercased.

    ASGI delivers headers as latin-1 byte pairs; ``from_asgi`` decodes them
    once when the request is built.
    """

    __slots__ = ()

    @staticmethod
    def fold(name: str) -> str:
        return name.lower()

    @classmethod
    def from_asgi(cls, raw: Iterable[tuple[bytes, bytes]]) -> "Headers":
        return cls((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)

    def cookies(self) -> dict[str, str]:
        """Cookies from every ``Cookie`` header, later values winning."""
        jar: dict[str, str] = {}
        for header in self.get_list("cookie"):
            for pair in header.split(";"):
                name, sep, value = pair.strip().partition("=")
                if sep:
                    jar[name.strip()] = value.strip()
        return jar
