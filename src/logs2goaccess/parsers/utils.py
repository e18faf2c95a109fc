"""
Helpers shared by the source format parsers.
"""

from typing import Any, Mapping

__all__ = ["Headers", "strip_port", "media_type", "dash_to_empty"]


class Headers:
    """
    Case-insensitive, multi-valued HTTP header lookup.

    Built from the ``name -> [values]`` maps found in structured access logs.
    A bare string value is treated as a single-element list.

    Raises:
        ValueError: If the map, or one of its values, has the wrong shape
    """

    def __init__(self, mapping: Mapping[str, Any] | None = None):
        if mapping is not None and not isinstance(mapping, Mapping):
            raise ValueError(f"header map is not an object: {type(mapping).__name__}")
        self._values: dict[str, list[str]] = {}
        for name, values in (mapping or {}).items():
            if values is None:
                continue
            if isinstance(values, (str, int, float)):
                values = [values]
            elif not isinstance(values, list):
                raise ValueError(f"header {name!r} has unsupported value {values!r}")
            self._values.setdefault(name.lower(), []).extend(str(v) for v in values)

    def get(self, name: str, default: str = "") -> str:
        """Return the first value of a header, or default."""
        values = self._values.get(name.lower())
        return values[0] if values else default

    def get_all(self, name: str) -> list[str]:
        return list(self._values.get(name.lower(), []))

    def joined(self, name: str) -> str:
        """Return all values of a header joined the way proxies fold them."""
        return ", ".join(self.get_all(name))

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._values


def strip_port(address: str) -> str:
    """
    Return the host part of an ``address:port`` string.

    - ``[v6]:port`` and ``[v6]`` return the bracketed address
    - ``v4:port`` returns the IPv4 address
    - a value without a colon is returned unchanged
    - an unbracketed value with several colons is a bare IPv6 address and is
      returned unchanged

    Raises:
        ValueError: If the port is not numeric or a bracket is unbalanced
    """
    address = address.strip()
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address {address!r}")
        rest = address[end + 1:]
        if rest and not (rest.startswith(":") and rest[1:].isdigit()):
            raise ValueError(f"invalid port in address {address!r}")
        return address[1:end]

    colons = address.count(":")
    if colons == 0 or colons > 1:
        return address

    host, _, port = address.partition(":")
    if not port.isdigit():
        raise ValueError(f"invalid port in address {address!r}")
    return host


def media_type(value: str) -> str:
    """Return the lower-cased media type of a Content-Type value, without parameters."""
    mtype = value.split(";", 1)[0].strip().lower()
    if "/" not in mtype:
        return ""
    return mtype


def dash_to_empty(value: str) -> str:
    """Map the ``-`` placeholder used by AWS logs to an empty string."""
    return "" if value == "-" else value
