"""Normalization of configured OAuth scopes."""

from .config import ScopeSpec


def resolve_scopes(scope_spec: ScopeSpec) -> list[str]:
    """
    Normalize a scope specification into the scopes sent to the provider.

    Accepts a single scope, a comma-delimited string, or a list of scopes.
    Tokens are trimmed, empty tokens dropped and duplicates removed while
    keeping the order of first occurrence.

    Args:
        scope_spec: Configured scopes (None or "" means no extra scopes)

    Returns:
        Ordered list of unique scope identifiers

    Raises:
        TypeError: If scope_spec is not a string, list, tuple or None
    """
    if scope_spec is None:
        return []

    if isinstance(scope_spec, str):
        candidates = scope_spec.split(",")
    elif isinstance(scope_spec, (list, tuple)):
        candidates = list(scope_spec)
    else:
        raise TypeError(
            f"Scopes must be a string or a list of strings, got {type(scope_spec).__name__}"
        )

    resolved: list[str] = []
    for candidate in candidates:
        if not isinstance(candidate, str):
            raise TypeError(f"Scope entries must be strings, got {candidate!r}")
        scope = candidate.strip()
        if scope and scope not in resolved:
            resolved.append(scope)
    return resolved
