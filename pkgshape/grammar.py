"""Pattern matchers for dependency specifier strings.

Every pattern is compiled once when the module is imported and never
modified afterwards, so the matchers below are plain functions that any
number of threads can call at once. There is no registry to populate and
nothing to reset.
"""

import re
from urllib.parse import urlsplit

# Protocol prefixes, longest ``git+`` forms before bare ``git``.
PROTOCOLS = (
    "workspace",
    "npm",
    "link",
    "file",
    "github",
    "git+ssh",
    "git+https",
    "git+http",
    "git+file",
    "git",
)

ARCHIVE_EXTENSIONS = (".tgz", ".tar.gz", ".tar")
VCS_HOSTS = frozenset({"github.com", "gitlab.com", "bitbucket.org"})

_PROTOCOL_RE = re.compile(
    r"(?P<protocol>" + "|".join(re.escape(p) for p in PROTOCOLS) + r"):(?P<rest>.*)",
    re.DOTALL,
)

# ., .., ./, ../ and their backslash forms; ~/ home-relative; POSIX absolute;
# drive letters; UNC shares.
_LOCAL_PATH_RE = re.compile(
    r"""
    \.{1,2}$
    | \.{1,2}[\\/]
    | ~[\\/]
    | /
    | [A-Za-z]:[\\/]
    | \\\\
    """,
    re.VERBOSE,
)

_SHORTHAND_RE = re.compile(
    r"(?P<owner>[A-Za-z0-9][\w.-]*)/(?P<repo>[\w.-]+)(?:#(?P<ref>.+))?",
    re.DOTALL,
)

# node-semver range grammar
_NR = r"(?:0|[1-9]\d*)"
_XR = rf"(?:[xX*]|{_NR})"
_PRE_ID = r"(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"
_PRERELEASE = rf"-{_PRE_ID}(?:\.{_PRE_ID})*"
_BUILD = r"\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"
_PARTIAL = rf"v?{_XR}(?:\.{_XR}(?:\.{_XR}(?:{_PRERELEASE})?(?:{_BUILD})?)?)?"
_OPERATOR = r"(?:<=|>=|<|>|=|~>|~|\^)"
_SIMPLE = rf"{_OPERATOR}?\s*{_PARTIAL}"
_HYPHEN = rf"{_PARTIAL}\s+-\s+{_PARTIAL}"
_RANGE = rf"(?:{_HYPHEN}|{_SIMPLE}(?:\s+{_SIMPLE})*)"

_SEMVER_RANGE_RE = re.compile(rf"\s*{_RANGE}(?:\s*\|\|\s*{_RANGE})*\s*")


def split_protocol(raw: str) -> tuple[str, str] | None:
    """Split ``protocol:rest``.

    Args:
        raw: Specifier text

    Returns:
        ``(protocol, rest)`` for a known protocol prefix, otherwise None
    """
    match = _PROTOCOL_RE.match(raw)
    if not match:
        return None
    return match.group("protocol"), match.group("rest")


def split_ref(value: str) -> tuple[str, str | None]:
    """Split a trailing ``#ref`` off a URL or shorthand."""
    base, sep, ref = value.partition("#")
    if not sep or not ref:
        return base, None
    return base, ref


def is_local_path(raw: str) -> bool:
    """Return True for relative, absolute, home-relative or drive-letter paths."""
    return _LOCAL_PATH_RE.match(raw) is not None


def match_github_shorthand(raw: str) -> tuple[str, str, str | None] | None:
    """Match ``owner/repo[#ref]``.

    Returns:
        ``(owner, repo, ref)`` or None
    """
    match = _SHORTHAND_RE.fullmatch(raw)
    if not match:
        return None
    owner, repo = match.group("owner"), match.group("repo")
    if repo in (".", ".."):
        return None
    return owner, repo, match.group("ref")


def is_semver_range(raw: str) -> bool:
    """Return True when ``raw`` parses as a node-semver range set."""
    return _SEMVER_RANGE_RE.fullmatch(raw) is not None


def _http_parts(raw: str):
    if not raw.startswith(("http://", "https://")):
        return None
    try:
        return urlsplit(raw)
    except ValueError:
        return None


def match_tarball_url(raw: str) -> bool:
    """Return True for ``http(s)://`` URLs whose path ends in an archive extension."""
    parts = _http_parts(raw)
    if parts is None or not parts.netloc:
        return False
    return parts.path.lower().endswith(ARCHIVE_EXTENSIONS)


def match_git_http_url(raw: str) -> bool:
    """Return True for ``http(s)://`` URLs that look like git remotes.

    A remote either ends in ``.git`` or lives on a known VCS host; archive
    URLs never qualify.
    """
    parts = _http_parts(raw)
    if parts is None or not parts.netloc:
        return False
    path = parts.path.lower()
    if path.endswith(ARCHIVE_EXTENSIONS):
        return False
    if path.endswith(".git"):
        return True
    return (parts.hostname or "").lower() in VCS_HOSTS
