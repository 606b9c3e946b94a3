from typing import Any


def ensure_identifier(value: Any, field_name: str = "identifier") -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} cannot be empty")
    if "\x00" in value:
        raise ValueError(f"{field_name} cannot contain NUL characters")
    return value


def quote_identifier(name: str) -> str:
    """Quote a SQL identifier, doubling embedded quotes.

    Dotted names are quoted per part so ``users.id`` becomes ``"users"."id"``.
    A bare ``*`` is returned unquoted.
    """
    if name == "*":
        return name
    return ".".join(part if part == "*" else '"' + part.replace('"', '""') + '"' for part in name.split("."))
