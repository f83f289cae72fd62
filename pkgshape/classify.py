"""Classification of dependency specifiers into resolution protocols."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Union

from . import grammar
from .containers import OrderedMap
from .errors import EmptySpecifier

logger = logging.getLogger(__name__)


class Protocol(str, Enum):
    """How a dependency is resolved."""

    SEMVER_RANGE = "range"
    TAG = "tag"
    GIT = "git"
    GITHUB = "github"
    TARBALL = "tarball"
    FILE = "file"
    LINK = "link"
    WORKSPACE = "workspace"
    ALIAS = "alias"


@dataclass(frozen=True)
class SemverRange:
    """A node-semver range such as ``^1.2.3`` or ``>=1 <2``."""

    range: str
    protocol = Protocol.SEMVER_RANGE

    def __str__(self) -> str:
        return self.range


@dataclass(frozen=True)
class Tag:
    """A dist-tag such as ``latest`` or ``beta``."""

    name: str
    protocol = Protocol.TAG

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class GitRemote:
    """A git repository URL.

    ``scheme`` is the transport (``git``, ``ssh``, ``http``, ``https`` or
    ``file``) and ``url`` is the URL handed to git, without the npm-only
    ``git+`` prefix and without the ``#ref`` fragment.
    """

    scheme: str
    url: str
    ref: str | None = None
    protocol = Protocol.GIT

    def __str__(self) -> str:
        prefix = "" if self.url.startswith("git:") else "git+"
        suffix = f"#{self.ref}" if self.ref else ""
        return f"{prefix}{self.url}{suffix}"


@dataclass(frozen=True)
class GitHubShorthand:
    """``owner/repo[#ref]`` on GitHub."""

    owner: str
    repo: str
    ref: str | None = None
    protocol = Protocol.GITHUB

    def __str__(self) -> str:
        suffix = f"#{self.ref}" if self.ref else ""
        return f"{self.owner}/{self.repo}{suffix}"


@dataclass(frozen=True)
class TarballUrl:
    """A remote tarball URL."""

    url: str
    protocol = Protocol.TARBALL

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True)
class LocalPath:
    """A directory or tarball on the local filesystem."""

    path: str
    protocol = Protocol.FILE

    def __str__(self) -> str:
        return f"file:{self.path}"


@dataclass(frozen=True)
class LinkPath:
    """A ``link:`` symlinked directory."""

    path: str
    protocol = Protocol.LINK

    def __str__(self) -> str:
        return f"link:{self.path}"


@dataclass(frozen=True)
class Workspace:
    """A ``workspace:`` reference to a sibling package."""

    range_suffix: str
    protocol = Protocol.WORKSPACE

    def __str__(self) -> str:
        return f"workspace:{self.range_suffix}"


@dataclass(frozen=True)
class NpmAlias:
    """``npm:<name>@<spec>``, installing ``name`` under another name."""

    name: str
    specifier: "DependencySpecifier"
    protocol = Protocol.ALIAS

    def __str__(self) -> str:
        return f"npm:{self.name}@{self.specifier}"


DependencySpecifier = Union[
    SemverRange,
    Tag,
    GitRemote,
    GitHubShorthand,
    TarballUrl,
    LocalPath,
    LinkPath,
    Workspace,
    NpmAlias,
]


def _split_alias(rest: str) -> tuple[str, str]:
    # A scoped name starts with "@", so the version separator is the first
    # "@" after the first character.
    at = rest.find("@", 1)
    if at == -1:
        return rest, ""
    return rest[:at], rest[at + 1 :]


def _classify_git(protocol: str, rest: str) -> GitRemote:
    if protocol == "git":
        url, ref = grammar.split_ref(f"git:{rest}")
        return GitRemote("git", url, ref)
    scheme = protocol.split("+", 1)[1]
    url, ref = grammar.split_ref(f"{scheme}:{rest}")
    return GitRemote(scheme, url, ref)


def _classify_protocol(protocol: str, rest: str, allow_alias: bool) -> DependencySpecifier:
    if protocol == "workspace":
        return Workspace(rest)
    if protocol == "npm":
        if not allow_alias:
            return Tag(f"npm:{rest}")
        name, nested = _split_alias(rest)
        if not name or (name.startswith("@") and "/" not in name):
            return Tag(f"npm:{rest}")
        nested = nested.strip()
        specifier = _classify(nested, allow_alias=False) if nested else SemverRange("*")
        return NpmAlias(name, specifier)
    if protocol == "link":
        return LinkPath(rest)
    if protocol == "file":
        return LocalPath(rest)
    if protocol == "github":
        shorthand = grammar.match_github_shorthand(rest)
        if shorthand:
            return GitHubShorthand(*shorthand)
        return Tag(f"github:{rest}")
    return _classify_git(protocol, rest)


def _classify(spec: str, allow_alias: bool) -> DependencySpecifier:
    # 1. Explicit protocol prefixes
    split = grammar.split_protocol(spec)
    if split:
        return _classify_protocol(*split, allow_alias=allow_alias)

    # 2. Bare http(s) URLs
    if grammar.match_tarball_url(spec):
        return TarballUrl(spec)
    if grammar.match_git_http_url(spec):
        url, ref = grammar.split_ref(spec)
        return GitRemote(url.split(":", 1)[0], url, ref)

    # 3. Filesystem paths
    if grammar.is_local_path(spec):
        return LocalPath(spec)

    # 4. GitHub shorthand
    shorthand = grammar.match_github_shorthand(spec)
    if shorthand:
        return GitHubShorthand(*shorthand)

    # 5. Semver ranges
    if grammar.is_semver_range(spec):
        return SemverRange(spec)

    # 6. Anything else is a dist-tag
    return Tag(spec)


def classify(raw: str) -> DependencySpecifier:
    """Classify a dependency specifier string.

    Rules are tried in a fixed order and the first match wins: protocol
    prefixes, bare http(s) URLs, filesystem paths, GitHub shorthands, semver
    ranges, and finally dist-tags, which accept any remaining text.

    Args:
        raw: The specifier as written in a dependency map

    Returns:
        One of the DependencySpecifier variants

    Raises:
        EmptySpecifier: If ``raw`` is empty or only whitespace
    """
    spec = raw.strip()
    if not spec:
        raise EmptySpecifier()
    result = _classify(spec, allow_alias=True)
    logger.debug("Classified %r as %s", raw, result.protocol.value)
    return result


def classify_dependencies(dependencies: Mapping[str, str]) -> OrderedMap[str, DependencySpecifier]:
    """Classify every entry of a dependency map, keeping its order.

    Raises:
        EmptySpecifier: Naming the first dependency with an empty specifier
    """
    classified: OrderedMap[str, DependencySpecifier] = OrderedMap()
    for name, raw in dependencies.items():
        try:
            classified[name] = classify(raw)
        except EmptySpecifier:
            raise EmptySpecifier(name) from None
    return classified
