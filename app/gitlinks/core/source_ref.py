"""Source reference extraction from installed package ids."""


def extract_git_source_from_id(package_id: str | None) -> str | None:
    """Derive a reinstallable source reference from a git package id.

    A git package id has the shape ``<name>@<source>[#<resolved-commit>]``,
    where ``<source>`` may itself carry a ``#<ref>`` (branch, tag or
    ``semver:`` range). Everything after the name separator ``@`` is
    kept, and only the final ``#`` fragment (the resolved commit) is
    dropped, so a reinstall resolves the latest commit of the same ref
    instead of pinning the old commit.

    npm adaptations: a leading ``@`` belongs to a scoped package name
    (``@scope/name``) and is not the separator, so ``"@foo"`` has no
    source. An id with a single ``#`` is read as ``<source>#<commit>``.

    Args:
        package_id: Installed package id.

    Returns:
        Source reference, or None if the id is empty or has no separator.

    Example:
        >>> extract_git_source_from_id("MyPkg@https://example.com/repo.git#abcdef123")
        'https://example.com/repo.git'
        >>> extract_git_source_from_id("MyPkg@https://example.com/repo.git#v1#abcdef123")
        'https://example.com/repo.git#v1'
    """
    if not package_id or not package_id.strip():
        return None

    at = package_id.find("@", 1 if package_id.startswith("@") else 0)
    if at < 0:
        return None

    source = package_id[at + 1 :]
    hash_index = source.rfind("#")
    if hash_index >= 0:
        source = source[:hash_index]

    return source
