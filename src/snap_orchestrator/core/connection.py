"""ADO-style connection string parsing.

Understands the ``Key=Value;Key=Value`` strings SQL Server tooling uses,
including quoted values and the usual keyword synonyms.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..__util__ import SnapError

SERVER_KEYS = ("server", "data source", "address", "addr", "network address")
DATABASE_KEYS = ("database", "initial catalog")
USER_KEYS = ("user id", "uid", "user", "username")
PASSWORD_KEYS = ("password", "pwd")
INTEGRATED_KEYS = ("integrated security", "trusted_connection")
TRUST_CERT_KEYS = ("trustservercertificate", "trust server certificate")

TRUE_VALUES = frozenset({"true", "yes", "sspi", "1"})


class ConnectionStringError(SnapError, ValueError):
    """The connection string could not be parsed."""


@dataclass(frozen=True)
class ConnectionInfo:
    """The parts of a connection string snap-orchestrator cares about.

    Attributes:
        server: Server address as written (may carry a port or protocol prefix)
        database: Database / initial catalog name
        user: Login name for SQL authentication
        password: Password for SQL authentication
        integrated_security: Use the OS identity instead of a login
        trust_server_certificate: Skip server certificate validation
        options: Every key (lower-cased) and value found
    """

    server: Optional[str] = None
    database: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    integrated_security: bool = False
    trust_server_certificate: bool = False
    options: dict[str, str] = field(default_factory=dict)


def _split_pairs(value: str) -> list[tuple[str, str]]:
    """Split on ';' while honouring single/double quoted values."""
    pairs = []
    key, buf = None, []
    quote = None
    i = 0
    while i < len(value):
        ch = value[i]
        if quote:
            if ch == quote:
                # doubled quote is an escaped quote
                if i + 1 < len(value) and value[i + 1] == quote:
                    buf.append(ch)
                    i += 2
                    continue
                quote = None
            else:
                buf.append(ch)
        elif ch in ("'", '"') and key is not None and not "".join(buf).strip():
            buf = []
            quote = ch
        elif ch == "=" and key is None:
            key = "".join(buf)
            buf = []
        elif ch == ";":
            pairs.append((key, "".join(buf)))
            key, buf = None, []
        else:
            buf.append(ch)
        i += 1

    if quote:
        raise ConnectionStringError("Unterminated quoted value in connection string")
    pairs.append((key, "".join(buf)))

    result = []
    for k, v in pairs:
        if k is None:
            if v.strip():
                raise ConnectionStringError(
                    f"Format of the connection string is invalid near '{v.strip()}'"
                )
            continue
        result.append((k.strip().lower(), v.strip()))
    return result


def _first(options: dict[str, str], keys) -> Optional[str]:
    for key in keys:
        if options.get(key):
            return options[key]
    return None


def parse_connection_string(value: str) -> ConnectionInfo:
    """Parse a connection string into a ConnectionInfo.

    Raises:
        ConnectionStringError: If a segment has no '=' or a quote is left open
    """
    options = dict(_split_pairs(value or ""))

    return ConnectionInfo(
        server=_first(options, SERVER_KEYS),
        database=_first(options, DATABASE_KEYS),
        user=_first(options, USER_KEYS),
        password=_first(options, PASSWORD_KEYS),
        integrated_security=(_first(options, INTEGRATED_KEYS) or "").lower()
        in TRUE_VALUES,
        trust_server_certificate=(_first(options, TRUST_CERT_KEYS) or "").lower()
        in TRUE_VALUES,
        options=options,
    )
