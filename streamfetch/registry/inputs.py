"""Input values routed by a registry: URLs and plain strings."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass

_SCHEME_RE = re.compile(r"([A-Za-z][A-Za-z0-9+.\-]*):")
_SPECIAL_PORTS: dict[str, int | None] = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
    "file": None,
}
_FORBIDDEN_HOST_CHARS = frozenset(" #%/:<>?@[\\]^|")
_STRIP_CHARS = "".join(chr(c) for c in range(0x21))


def _split_off(text: str, separator: str) -> tuple[str, str | None]:
    head, found, tail = text.partition(separator)
    return (head, tail) if found else (text, None)


def _split_authority(text: str) -> tuple[str, str]:
    match = re.search(r"[/?#]", text)
    if match is None:
        return text, ""
    return text[: match.start()], text[match.start() :]


def _parse_port(text: str) -> int | None:
    if not text:
        return None
    if not text.isdigit() or int(text) > 65535:
        raise ValueError(f"invalid port number: {text!r}")
    return int(text)


def _parse_host_port(authority: str) -> tuple[str, int | None]:
    if authority.startswith("["):
        close = authority.find("]")
        if close < 0:
            raise ValueError("invalid IPv6 address")
        try:
            ipaddress.IPv6Address(authority[1:close])
        except ValueError as exc:
            raise ValueError("invalid IPv6 address") from exc
        host, rest = authority[: close + 1].lower(), authority[close + 1 :]
        if rest and not rest.startswith(":"):
            raise ValueError("invalid IPv6 address")
        return host, _parse_port(rest[1:])
    host, colon, port = authority.rpartition(":")
    if not colon:
        return authority, None
    return host, _parse_port(port)


@dataclass(frozen=True)
class Url:
    """An absolute URL, normalised in the way browsers serialise it."""

    scheme: str
    host: str | None = None
    port: int | None = None
    path: str = ""
    query: str | None = None
    fragment: str | None = None
    username: str = ""
    password: str | None = None

    @classmethod
    def parse(cls, value: str) -> Url:
        """Parse an absolute URL; raises ``ValueError`` when it is not one."""
        text = value.strip(_STRIP_CHARS)
        for char in "\t\n\r":
            text = text.replace(char, "")
        match = _SCHEME_RE.match(text)
        if match is None:
            raise ValueError(f"relative URL without a base: {value!r}")
        scheme = match.group(1).lower()
        rest, fragment = _split_off(text[match.end() :], "#")
        rest, query = _split_off(rest, "?")

        if scheme not in _SPECIAL_PORTS:
            if not rest.startswith("//"):
                return cls(scheme=scheme, path=rest, query=query, fragment=fragment)
            authority, path = _split_authority(rest[2:])
            username, user_info, host, port = cls._parse_authority(authority)
            return cls(scheme, host, port, path, query, fragment, username, user_info)

        rest = rest.replace("\\", "/")
        if scheme == "file":
            if rest.startswith("//"):
                authority, path = _split_authority(rest[2:])
            else:
                authority, path = "", rest
            host = authority.lower()
            if host == "localhost":
                host = ""
            return cls(scheme, host, None, path or "/", query, fragment)

        authority, path = _split_authority(rest.lstrip("/"))
        username, user_info, host, port = cls._parse_authority(authority)
        if not host:
            raise ValueError(f"empty host: {value!r}")
        host = host.lower()
        if not host.startswith("[") and _FORBIDDEN_HOST_CHARS.intersection(host):
            raise ValueError(f"invalid domain character in {value!r}")
        if port == _SPECIAL_PORTS[scheme]:
            port = None
        return cls(scheme, host, port, path or "/", query, fragment, username, user_info)

    @staticmethod
    def _parse_authority(authority: str) -> tuple[str, str | None, str, int | None]:
        userinfo, at, hostport = authority.rpartition("@")
        host, port = _parse_host_port(hostport)
        if not at:
            return "", None, host, port
        username, sep, remainder = userinfo.partition(":")
        return username, (remainder if sep else None), host, port

    @property
    def domain(self) -> str | None:
        """The host if it is a domain name, ``None`` for IP addresses or no host."""
        if not self.host or self.host.startswith("["):
            return None
        try:
            ipaddress.IPv4Address(self.host)
        except ValueError:
            return self.host
        return None

    def __str__(self) -> str:
        parts = [self.scheme, ":"]
        if self.host is not None:
            parts.append("//")
            if self.username or self.password is not None:
                parts.append(self.username)
                if self.password is not None:
                    parts.append(":")
                    parts.append(self.password)
                parts.append("@")
            parts.append(self.host)
            if self.port is not None:
                parts.append(f":{self.port}")
        parts.append(self.path)
        if self.query is not None:
            parts.append(f"?{self.query}")
        if self.fragment is not None:
            parts.append(f"#{self.fragment}")
        return "".join(parts)


@dataclass(frozen=True)
class Source:
    """The input source: a URL or any other string."""

    value: Url | str

    @classmethod
    def from_string(cls, value: str) -> Source:
        """Use a URL when ``value`` parses as one, the plain string otherwise."""
        try:
            return cls(Url.parse(value))
        except ValueError:
            return cls(value)

    @property
    def is_url(self) -> bool:
        return isinstance(self.value, Url)

    def try_into_url(self) -> Url | None:
        """Return the URL, or ``None`` for a string source."""
        return self.value if isinstance(self.value, Url) else None

    def into_url(self) -> Url:
        """Return the URL; raises ``ValueError`` for a string source."""
        url = self.try_into_url()
        if url is None:
            raise ValueError("incorrect input type")
        return url

    def try_into_string(self) -> str | None:
        """Return the string, or ``None`` for a URL source."""
        return self.value if isinstance(self.value, str) else None

    def into_string(self) -> str:
        """Return the string; raises ``ValueError`` for a URL source."""
        text = self.try_into_string()
        if text is None:
            raise ValueError("incorrect input type")
        return text

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Input:
    """Input supplied to the registry, with the prefix a rule stripped, if any."""

    prefix: str | None
    source: Source

    def into_raw(self) -> str:
        """Convert the input back into its raw string form."""
        return str(self)

    def __str__(self) -> str:
        return f"{self.prefix or ''}{self.source}"