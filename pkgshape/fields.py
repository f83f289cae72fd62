"""Typed shapes for package.json fields.

Several manifest fields accept more than one JSON shape for the same idea:
``author`` may be ``"Jane <jane@example.com>"`` or ``{"name": "Jane"}``,
``bin`` may be a single path or a map of commands. Each such field has one
``normalize_*`` function turning any accepted JSON value into a single
Python type and one ``denormalize_*`` function emitting that type's
normalized JSON shape. Nothing outside this module (and ``exports``) looks
at raw JSON shapes.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Union

import semver

from .containers import OrderedMap, OrderedSet
from .errors import ConflictingPlatformList, InvalidSemver, ShapeMismatch, json_kind
from .exports import DEFAULT_MAX_DEPTH, denormalize_exports, denormalize_imports, normalize_exports, normalize_imports


def mismatch(field_name: str, value: Any, *expected: str) -> ShapeMismatch:
    return ShapeMismatch(field_name, expected, json_kind(value))


# Scalars


def normalize_string(field_name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise mismatch(field_name, value, "string")
    return value


def normalize_bool(field_name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise mismatch(field_name, value, "boolean")
    return value


def normalize_string_list(field_name: str, value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise mismatch(field_name, value, "array of strings")
    return list(value)


def normalize_string_map(field_name: str, value: Any) -> OrderedMap[str, str]:
    """Normalize an object whose values are all strings (scripts, engines, dependencies)."""
    if not isinstance(value, dict):
        raise mismatch(field_name, value, "object")
    result: OrderedMap[str, str] = OrderedMap()
    for key, item in value.items():
        if not isinstance(item, str):
            raise ShapeMismatch(f"{field_name}.{key}", ("string",), json_kind(item))
        result[key] = item
    return result


def normalize_object(field_name: str, value: Any) -> OrderedMap[str, Any]:
    if not isinstance(value, dict):
        raise mismatch(field_name, value, "object")
    return OrderedMap(value)


def normalize_version(value: Any, field_name: str = "version") -> semver.Version:
    """Parse a strict SemVer 2.0 version.

    Raises:
        ShapeMismatch: If the value is not a string
        InvalidSemver: If the string is not a valid version
    """
    raw = normalize_string(field_name, value)
    try:
        return semver.Version.parse(raw)
    except ValueError as exc:
        raise InvalidSemver(raw, str(exc), field=field_name) from exc


def denormalize_version(version: semver.Version) -> str:
    return str(version)


MODULE_TYPES = ("module", "commonjs")


def normalize_module_type(value: Any) -> str:
    raw = normalize_string("type", value)
    if raw not in MODULE_TYPES:
        raise ShapeMismatch("type", tuple(f'"{name}"' for name in MODULE_TYPES), "string")
    return raw


# People


@dataclass
class Person:
    """An author, contributor or maintainer."""

    name: str
    email: str | None = None
    url: str | None = None

    @classmethod
    def parse(cls, text: str) -> "Person":
        """Parse npm's ``Name <email> (url)`` string form."""
        name = re.match(r"[^(<]*", text).group(0).strip()
        email = re.search(r"<([^<>]+)>", text)
        url = re.search(r"\(([^()]+)\)", text)
        return cls(
            name=name,
            email=email.group(1).strip() if email else None,
            url=url.group(1).strip() if url else None,
        )

    def __str__(self) -> str:
        parts = [self.name] if self.name else []
        if self.email:
            parts.append(f"<{self.email}>")
        if self.url:
            parts.append(f"({self.url})")
        return " ".join(parts)


def _optional_string(field_name: str, value: dict, key: str) -> str | None:
    item = value.get(key)
    if item is None:
        return None
    if not isinstance(item, str):
        raise ShapeMismatch(f"{field_name}.{key}", ("string",), json_kind(item))
    return item


def normalize_person(field_name: str, value: Any) -> Person:
    if isinstance(value, str):
        return Person.parse(value)
    if isinstance(value, dict):
        return Person(
            name=_optional_string(field_name, value, "name") or "",
            email=_optional_string(field_name, value, "email"),
            url=_optional_string(field_name, value, "url"),
        )
    raise mismatch(field_name, value, "string", "object")


def denormalize_person(person: Person, shape: str = "object") -> str | dict:
    if shape == "string":
        return str(person)
    result: dict[str, str] = {"name": person.name}
    if person.email:
        result["email"] = person.email
    if person.url:
        result["url"] = person.url
    return result


def normalize_people(field_name: str, value: Any) -> list[Person]:
    if not isinstance(value, list):
        raise mismatch(field_name, value, "array")
    return [normalize_person(field_name, item) for item in value]


def denormalize_people(people: list[Person]) -> list:
    return [denormalize_person(person) for person in people]


# Licenses


@dataclass
class SpdxLicense:
    """An SPDX expression such as ``MIT`` or ``(MIT OR Apache-2.0)``."""

    expression: str


@dataclass
class LicenseObject:
    """The deprecated ``{"type": ..., "url": ...}`` license form."""

    type: str
    url: str | None = None


@dataclass
class LicenseList:
    """The deprecated array of license objects."""

    licenses: list[LicenseObject] = field(default_factory=list)


License = Union[SpdxLicense, LicenseObject, LicenseList]


def _license_object(field_name: str, value: dict) -> LicenseObject:
    return LicenseObject(
        type=_optional_string(field_name, value, "type") or "",
        url=_optional_string(field_name, value, "url"),
    )


def normalize_license(value: Any, field_name: str = "license") -> License:
    if isinstance(value, str):
        return SpdxLicense(value)
    if isinstance(value, dict):
        return _license_object(field_name, value)
    if isinstance(value, list):
        if not all(isinstance(item, dict) for item in value):
            raise mismatch(field_name, value, "string", "object", "array of objects")
        return LicenseList([_license_object(field_name, item) for item in value])
    raise mismatch(field_name, value, "string", "object", "array of objects")


def _denormalize_license_object(license_object: LicenseObject) -> dict:
    result = {"type": license_object.type}
    if license_object.url is not None:
        result["url"] = license_object.url
    return result


def denormalize_license(license: License) -> str | dict | list:
    if isinstance(license, SpdxLicense):
        return license.expression
    if isinstance(license, LicenseObject):
        return _denormalize_license_object(license)
    return [_denormalize_license_object(item) for item in license.licenses]


def normalize_licenses(value: Any) -> LicenseList:
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise mismatch("licenses", value, "array of objects")
    return LicenseList([_license_object("licenses", item) for item in value])


# Repository, bugs, funding


@dataclass
class Repository:
    type: str | None = None
    url: str = ""
    directory: str | None = None


def normalize_repository(value: Any) -> Repository:
    if isinstance(value, str):
        return Repository(url=value)
    if isinstance(value, dict):
        return Repository(
            type=_optional_string("repository", value, "type"),
            url=_optional_string("repository", value, "url") or "",
            directory=_optional_string("repository", value, "directory"),
        )
    raise mismatch("repository", value, "string", "object")


def denormalize_repository(repository: Repository) -> dict:
    result = {}
    if repository.type:
        result["type"] = repository.type
    result["url"] = repository.url
    if repository.directory:
        result["directory"] = repository.directory
    return result


@dataclass
class Bugs:
    url: str | None = None
    email: str | None = None


def normalize_bugs(value: Any) -> Bugs:
    if isinstance(value, str):
        return Bugs(url=value)
    if isinstance(value, dict):
        return Bugs(
            url=_optional_string("bugs", value, "url"),
            email=_optional_string("bugs", value, "email"),
        )
    raise mismatch("bugs", value, "string", "object")


def denormalize_bugs(bugs: Bugs) -> dict:
    result = {}
    if bugs.url:
        result["url"] = bugs.url
    if bugs.email:
        result["email"] = bugs.email
    return result


@dataclass
class Funding:
    url: str
    type: str | None = None


def _funding_entry(value: Any) -> Funding:
    if isinstance(value, str):
        return Funding(url=value)
    if isinstance(value, dict):
        return Funding(
            url=_optional_string("funding", value, "url") or "",
            type=_optional_string("funding", value, "type"),
        )
    raise mismatch("funding", value, "string", "object", "array")


def normalize_funding(value: Any) -> list[Funding]:
    if isinstance(value, list):
        return [_funding_entry(item) for item in value]
    return [_funding_entry(value)]


def _denormalize_funding_entry(funding: Funding) -> dict:
    result = {}
    if funding.type:
        result["type"] = funding.type
    result["url"] = funding.url
    return result


def denormalize_funding(funding: list[Funding]) -> dict | list:
    if len(funding) == 1:
        return _denormalize_funding_entry(funding[0])
    return [_denormalize_funding_entry(item) for item in funding]


# bin


def bin_name(package_name: str) -> str:
    """Command name npm derives from a package name: ``@scope/tool`` -> ``tool``."""
    return package_name.rsplit("/", 1)[-1]


def normalize_bin(value: Any, package_name: str | None) -> OrderedMap[str, str]:
    if isinstance(value, str):
        if not package_name:
            raise ShapeMismatch("bin", ("object",), "string")
        return OrderedMap({bin_name(package_name): value})
    if isinstance(value, dict):
        return normalize_string_map("bin", value)
    raise mismatch("bin", value, "string", "object")


def denormalize_bin(commands: OrderedMap[str, str]) -> dict:
    return dict(commands)


# Workspaces


@dataclass
class Workspaces:
    packages: list[str] = field(default_factory=list)
    nohoist: list[str] = field(default_factory=list)


def normalize_workspaces(value: Any) -> Workspaces:
    if isinstance(value, list):
        return Workspaces(packages=normalize_string_list("workspaces", value))
    if isinstance(value, dict):
        return Workspaces(
            packages=normalize_string_list("workspaces.packages", value.get("packages", [])),
            nohoist=normalize_string_list("workspaces.nohoist", value.get("nohoist", [])),
        )
    raise mismatch("workspaces", value, "array", "object")


def denormalize_workspaces(workspaces: Workspaces) -> list | dict:
    if not workspaces.nohoist:
        return list(workspaces.packages)
    return {"packages": list(workspaces.packages), "nohoist": list(workspaces.nohoist)}


# os / cpu


@dataclass
class PlatformList:
    """``os`` or ``cpu``: either an allow-list or a ``!``-prefixed deny-list."""

    entries: OrderedSet[str] = field(default_factory=OrderedSet)
    negated: bool = False

    def allows(self, platform: str) -> bool:
        if not self.entries:
            return True
        if self.negated:
            return platform not in self.entries
        return platform in self.entries


def normalize_platforms(field_name: str, value: Any) -> PlatformList:
    """Normalize an ``os``/``cpu`` list.

    Raises:
        ConflictingPlatformList: If plain and negated entries are mixed
    """
    items = normalize_string_list(field_name, value)
    included = [item for item in items if not item.startswith("!")]
    negated = [item[1:] for item in items if item.startswith("!")]
    if included and negated:
        raise ConflictingPlatformList(field_name, included, negated)
    if negated:
        return PlatformList(OrderedSet(negated), negated=True)
    return PlatformList(OrderedSet(included))


def denormalize_platforms(platforms: PlatformList) -> list[str]:
    prefix = "!" if platforms.negated else ""
    return [f"{prefix}{entry}" for entry in platforms.entries]


# packageManager


@dataclass
class PackageManager:
    """Corepack's ``name@version[+hash]``."""

    name: str
    version: semver.Version
    hash: str | None = None

    def __str__(self) -> str:
        suffix = f"+{self.hash}" if self.hash else ""
        return f"{self.name}@{self.version}{suffix}"


_PACKAGE_MANAGER = re.compile(r"(?P<name>(?:@[^/@]+/)?[^@]+)@(?P<version>[^+]+)(?:\+(?P<hash>.+))?")


def normalize_package_manager(value: Any) -> PackageManager:
    raw = normalize_string("packageManager", value)
    match = _PACKAGE_MANAGER.fullmatch(raw)
    if not match:
        raise ShapeMismatch("packageManager", ('"name@version"',), "string")
    return PackageManager(
        name=match.group("name"),
        version=normalize_version(match.group("version"), field_name="packageManager"),
        hash=match.group("hash"),
    )


# peerDependenciesMeta


@dataclass
class PeerDependencyMeta:
    """One ``peerDependenciesMeta`` entry; unknown keys are kept in place."""

    entries: OrderedMap[str, Any] = field(default_factory=OrderedMap)

    @property
    def optional(self) -> bool:
        return self.entries.get("optional", False) is True

    @optional.setter
    def optional(self, value: bool) -> None:
        self.entries["optional"] = value


def normalize_peer_meta(value: Any) -> OrderedMap[str, PeerDependencyMeta]:
    if not isinstance(value, dict):
        raise mismatch("peerDependenciesMeta", value, "object")
    result: OrderedMap[str, PeerDependencyMeta] = OrderedMap()
    for name, meta in value.items():
        field_name = f"peerDependenciesMeta.{name}"
        if not isinstance(meta, dict):
            raise mismatch(field_name, meta, "object")
        if "optional" in meta:
            normalize_bool(f"{field_name}.optional", meta["optional"])
        result[name] = PeerDependencyMeta(OrderedMap(meta))
    return result


def denormalize_peer_meta(meta: OrderedMap[str, PeerDependencyMeta]) -> dict:
    return {name: dict(entry.entries) for name, entry in meta.items()}


# bundleDependencies


def normalize_bundle(value: Any) -> list[str] | bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, list):
        return normalize_string_list("bundleDependencies", value)
    raise mismatch("bundleDependencies", value, "array of strings", "boolean")


# Registry


@dataclass
class FieldContext:
    """What a normalizer may need besides the value itself."""

    package_name: str | None = None
    max_exports_depth: int = DEFAULT_MAX_DEPTH


def _plain(value: Any) -> Any:
    if isinstance(value, OrderedMap):
        return dict(value)
    if isinstance(value, list):
        return list(value)
    return value


@dataclass(frozen=True)
class FieldSpec:
    """How one top-level key maps onto a Manifest attribute."""

    key: str
    attr: str
    normalize: Callable[[Any, FieldContext], Any]
    denormalize: Callable[[Any], Any] = _plain
    polymorphic: bool = False


def _scalar(key: str, attr: str | None = None, kind: Callable[[str, Any], Any] = normalize_string) -> FieldSpec:
    return FieldSpec(key, attr or key, lambda value, ctx: kind(key, value))


# Canonical order for newly added fields, after npm's documentation.
KNOWN_FIELDS: tuple[FieldSpec, ...] = (
    _scalar("name"),
    FieldSpec("version", "version", lambda value, ctx: normalize_version(value), denormalize_version),
    _scalar("description"),
    _scalar("keywords", kind=normalize_string_list),
    _scalar("homepage"),
    FieldSpec("bugs", "bugs", lambda value, ctx: normalize_bugs(value), denormalize_bugs, polymorphic=True),
    FieldSpec("license", "license", lambda value, ctx: normalize_license(value), denormalize_license, polymorphic=True),
    FieldSpec(
        "licenses", "licenses", lambda value, ctx: normalize_licenses(value), denormalize_license, polymorphic=True
    ),
    FieldSpec(
        "author", "author", lambda value, ctx: normalize_person("author", value), denormalize_person, polymorphic=True
    ),
    FieldSpec(
        "contributors",
        "contributors",
        lambda value, ctx: normalize_people("contributors", value),
        denormalize_people,
        polymorphic=True,
    ),
    FieldSpec(
        "maintainers",
        "maintainers",
        lambda value, ctx: normalize_people("maintainers", value),
        denormalize_people,
        polymorphic=True,
    ),
    FieldSpec("funding", "funding", lambda value, ctx: normalize_funding(value), denormalize_funding, polymorphic=True),
    _scalar("files", kind=normalize_string_list),
    FieldSpec("type", "type", lambda value, ctx: normalize_module_type(value)),
    _scalar("main"),
    _scalar("module"),
    _scalar("types"),
    _scalar("typings"),
    FieldSpec(
        "bin", "bin", lambda value, ctx: normalize_bin(value, ctx.package_name), denormalize_bin, polymorphic=True
    ),
    FieldSpec(
        "exports",
        "exports",
        lambda value, ctx: normalize_exports(value, max_depth=ctx.max_exports_depth),
        denormalize_exports,
    ),
    FieldSpec(
        "imports",
        "imports",
        lambda value, ctx: normalize_imports(value, max_depth=ctx.max_exports_depth),
        denormalize_imports,
    ),
    FieldSpec(
        "repository", "repository", lambda value, ctx: normalize_repository(value), denormalize_repository, polymorphic=True
    ),
    _scalar("scripts", kind=normalize_string_map),
    _scalar("engines", kind=normalize_string_map),
    _scalar("engineStrict", "engine_strict", kind=normalize_bool),
    FieldSpec("os", "os", lambda value, ctx: normalize_platforms("os", value), denormalize_platforms),
    FieldSpec("cpu", "cpu", lambda value, ctx: normalize_platforms("cpu", value), denormalize_platforms),
    _scalar("private", kind=normalize_bool),
    FieldSpec(
        "workspaces", "workspaces", lambda value, ctx: normalize_workspaces(value), denormalize_workspaces, polymorphic=True
    ),
    FieldSpec("packageManager", "package_manager", lambda value, ctx: normalize_package_manager(value), str),
    _scalar("dependencies", kind=normalize_string_map),
    _scalar("devDependencies", "dev_dependencies", kind=normalize_string_map),
    _scalar("peerDependencies", "peer_dependencies", kind=normalize_string_map),
    FieldSpec("peerDependenciesMeta", "peer_dependencies_meta", lambda value, ctx: normalize_peer_meta(value), denormalize_peer_meta),
    _scalar("optionalDependencies", "optional_dependencies", kind=normalize_string_map),
    FieldSpec("bundleDependencies", "bundle_dependencies", lambda value, ctx: normalize_bundle(value)),
    FieldSpec("bundledDependencies", "bundle_dependencies", lambda value, ctx: normalize_bundle(value)),
    _scalar("publishConfig", "publish_config", kind=normalize_object),
)

FIELDS_BY_KEY: dict[str, FieldSpec] = {spec.key: spec for spec in KNOWN_FIELDS}

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies")
