"""
Helpers for translating provider connection URLs.

Provider URLs follow the conventions of the migration tool's schema files
(``file:./app.db``, ``sqlserver://host:1433;database=x``). SQLAlchemy expects
its own dialect URLs, so the built-in client translates before creating an
engine.
"""

import re
from urllib.parse import quote

from ..exceptions import UnsupportedProviderError

_PASSWORD_PATTERN = re.compile(r"(://[^:/@;]+:)([^@]*)(@)")
_SQLSERVER_PASSWORD_PATTERN = re.compile(r"(password=)([^;]*)", re.IGNORECASE)


def mask_url(url: str) -> str:
    """Hide the password component of a URL for logging."""
    masked = _PASSWORD_PATTERN.sub(r"\1***\3", url)
    return _SQLSERVER_PASSWORD_PATTERN.sub(r"\1***", masked)


def _sqlserver_to_sqlalchemy(url: str) -> str:
    """Convert ``sqlserver://host:port;key=value;...`` to an mssql+pyodbc URL."""
    body = url[len("sqlserver://") :]
    hostport, _, rest = body.partition(";")
    params: dict[str, str] = {}
    for item in rest.split(";"):
        if "=" in item:
            key, _, value = item.partition("=")
            params[key.strip().lower()] = value.strip()

    auth = ""
    user = params.get("user") or params.get("username")
    if user:
        auth = quote(user, safe="")
        if params.get("password"):
            auth += ":" + quote(params["password"], safe="")
        auth += "@"
    database = params.get("database", "")
    return f"mssql+pyodbc://{auth}{hostport}/{database}"


def to_sqlalchemy_url(url: str) -> str:
    """
    Translate a provider URL into a SQLAlchemy URL.

    Raises:
        UnsupportedProviderError: For schemes SQLAlchemy cannot drive (MongoDB)
    """
    if url.startswith("file:"):
        path = url[len("file:") :]
        if path.startswith("//"):
            path = path[2:]
        return f"sqlite:///{path}"
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://") :]
    if url.startswith("cockroachdb://"):
        return "postgresql://" + url[len("cockroachdb://") :]
    if url.startswith("sqlserver://"):
        return _sqlserver_to_sqlalchemy(url)
    if url.startswith(("mongodb://", "mongodb+srv://")):
        raise UnsupportedProviderError("mongodb", reason="no SQLAlchemy dialect")
    return url
