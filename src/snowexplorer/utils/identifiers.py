"""Utilities for handling Snowflake identifiers"""


def is_quoted(name: str) -> bool:
    """Check if an identifier is wrapped in double quotes"""
    return len(name) >= 2 and name[0] == '"' and name[-1] == '"'


def strip_quotes(name: str) -> str:
    """Remove wrapping double quotes and unescape doubled quotes inside"""
    if not is_quoted(name):
        return name
    return name[1:-1].replace('""', '"')


def lookup_key(name: str) -> tuple[str, bool]:
    """Return the value to match a user-supplied identifier against SHOW output

    Quoted identifiers match exactly with their quotes removed; unquoted ones
    match case-insensitively. The boolean is True for an exact match.
    """
    if is_quoted(name):
        return strip_quotes(name), True
    return name.upper(), False
