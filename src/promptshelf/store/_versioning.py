"""Version string helpers for prompt archival."""

INITIAL_VERSION = "1.0.0"
"""Version assigned to prompts saved without one."""


def increment_version(version: str) -> str:
    """Return the version that follows ``version``.

    Examples:
        >>> increment_version("")
        '1.0.0'
        >>> increment_version("1.2.3")
        '1.2.4'
        >>> increment_version("7")
        '8'
        >>> increment_version("beta")
        'beta.1'
    """
    version = version.strip()
    if not version:
        return INITIAL_VERSION

    parts = version.split(".")
    if len(parts) == 3 and all(part.isdigit() for part in parts):
        major, minor, patch = parts
        return f"{major}.{minor}.{int(patch) + 1}"

    if version.isdigit():
        return str(int(version) + 1)

    return f"{version}.1"


def version_key(version: str) -> tuple[tuple[int, int | str], ...]:
    """Sort key ordering dotted versions numerically.

    Numeric components sort before text components at the same position.

    Example:
        >>> sorted(["1.0.10", "1.0.2", "1.0.9"], key=version_key)
        ['1.0.2', '1.0.9', '1.0.10']
    """
    return tuple(
        (0, int(part)) if part.isdigit() else (1, part)
        for part in version.strip().split(".")
    )
