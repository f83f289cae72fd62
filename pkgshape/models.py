"""Core data models for pkgshape."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import semver

from .classify import DependencySpecifier, classify, classify_dependencies
from .containers import OrderedMap
from .errors import EmptySpecifier
from .exports import Exports
from .fields import (
    DEPENDENCY_SECTIONS,
    FIELDS_BY_KEY,
    Bugs,
    Funding,
    License,
    LicenseList,
    PackageManager,
    PeerDependencyMeta,
    Person,
    PlatformList,
    Repository,
    Workspaces,
)


@dataclass(frozen=True)
class DependencyEntry:
    """A single entry of one dependency map."""

    section: str  # dependencies, devDependencies, peerDependencies, optionalDependencies
    name: str
    spec: str

    def classify(self) -> DependencySpecifier:
        """Classify ``spec``; the stored string is never changed."""
        try:
            return classify(self.spec)
        except EmptySpecifier:
            raise EmptySpecifier(self.name) from None


@dataclass
class Manifest:
    """A parsed package.json document.

    Known fields are typed attributes; everything else lives in ``extras``.
    ``key_order`` records the top-level key order as read so serialization can
    interleave known and unknown keys exactly as they were.
    """

    name: str | None = None
    version: semver.Version | None = None
    description: str | None = None
    keywords: list[str] | None = None
    homepage: str | None = None
    bugs: Bugs | None = None
    license: License | None = None
    licenses: LicenseList | None = None
    author: Person | None = None
    contributors: list[Person] | None = None
    maintainers: list[Person] | None = None
    funding: list[Funding] | None = None
    files: list[str] | None = None
    type: str | None = None
    main: str | None = None
    module: str | None = None
    types: str | None = None
    typings: str | None = None
    bin: OrderedMap[str, str] | None = None
    exports: Exports = None
    imports: OrderedMap[str, Exports] | None = None
    repository: Repository | None = None
    scripts: OrderedMap[str, str] | None = None
    engines: OrderedMap[str, str] | None = None
    engine_strict: bool | None = None
    os: PlatformList | None = None
    cpu: PlatformList | None = None
    private: bool | None = None
    workspaces: Workspaces | None = None
    package_manager: PackageManager | None = None
    dependencies: OrderedMap[str, str] | None = None
    dev_dependencies: OrderedMap[str, str] | None = None
    peer_dependencies: OrderedMap[str, str] | None = None
    peer_dependencies_meta: OrderedMap[str, PeerDependencyMeta] | None = None
    optional_dependencies: OrderedMap[str, str] | None = None
    bundle_dependencies: list[str] | bool | None = None
    publish_config: OrderedMap[str, Any] | None = None

    extras: OrderedMap[str, Any] = field(default_factory=OrderedMap)
    key_order: list[str] = field(default_factory=list, repr=False)

    # Polymorphic fields exactly as read, so untouched ones keep their shape.
    originals: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
    # Source formatting, reused on output.
    indent: str | int | None = field(default=2, repr=False, compare=False)
    trailing_newline: bool = field(default=True, repr=False, compare=False)
    line_ending: str = field(default="\n", repr=False, compare=False)

    # Dependencies

    def _section_attr(self, section: str) -> str:
        if section in DEPENDENCY_SECTIONS:
            return FIELDS_BY_KEY[section].attr
        for key in DEPENDENCY_SECTIONS:
            if FIELDS_BY_KEY[key].attr == section:
                return section
        raise ValueError(f"Unknown dependency section: {section}")

    def dependency_map(self, section: str = "dependencies") -> OrderedMap[str, str]:
        """Raw specifiers of one dependency map (empty if the map is absent).

        Args:
            section: JSON key (``devDependencies``) or attribute name
                (``dev_dependencies``)
        """
        return getattr(self, self._section_attr(section)) or OrderedMap()

    def add_dependency(self, name: str, spec: str, section: str = "dependencies") -> bool:
        """Insert or update a dependency.

        A new name is appended; an existing name keeps its position.

        Returns:
            True if the name was not present before
        """
        attr = self._section_attr(section)
        deps = getattr(self, attr)
        if deps is None:
            deps = OrderedMap()
            setattr(self, attr, deps)
        return deps.insert(name, spec)

    def remove_dependency(self, name: str, section: str = "dependencies") -> str:
        """Remove a dependency and return its raw specifier.

        Raises:
            KeyError: If the dependency is not declared in ``section``
        """
        deps = getattr(self, self._section_attr(section))
        if deps is None:
            raise KeyError(name)
        return deps.remove(name)

    def dependency_specifier(self, name: str, section: str = "dependencies") -> DependencySpecifier:
        """Classify one dependency on demand.

        Raises:
            KeyError: If the dependency is not declared in ``section``
            EmptySpecifier: If its specifier is empty
        """
        deps = self.dependency_map(section)
        return DependencyEntry(section, name, deps[name]).classify()

    def classified_dependencies(self, section: str = "dependencies") -> OrderedMap[str, DependencySpecifier]:
        return classify_dependencies(self.dependency_map(section))

    def iter_dependencies(self) -> Iterator[DependencyEntry]:
        """Yield every dependency across the four maps.

        A name declared in several maps is yielded once per map.
        """
        for section in DEPENDENCY_SECTIONS:
            for name, spec in self.dependency_map(section).items():
                yield DependencyEntry(section, name, spec)

    # Scripts

    def set_script(self, name: str, command: str) -> bool:
        if self.scripts is None:
            self.scripts = OrderedMap()
        return self.scripts.insert(name, command)

    def remove_script(self, name: str) -> str:
        if self.scripts is None:
            raise KeyError(name)
        return self.scripts.remove(name)

    # Unknown fields

    def set_extra(self, key: str, value: Any) -> None:
        """Set an unrecognized top-level field.

        Raises:
            ValueError: If ``key`` is a known field; set the attribute instead
        """
        if key in FIELDS_BY_KEY:
            raise ValueError(f"{key!r} is a known field; set Manifest.{FIELDS_BY_KEY[key].attr}")
        self.extras[key] = value

    def remove_extra(self, key: str) -> Any:
        value = self.extras.remove(key)
        if key in self.key_order:
            self.key_order.remove(key)
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Typed value of a known field or raw value of an extra, by JSON key."""
        if key in FIELDS_BY_KEY and key not in self.extras:
            value = getattr(self, FIELDS_BY_KEY[key].attr)
            return default if value is None else value
        return self.extras.get(key, default)

    def clear_field(self, key: str) -> None:
        """Remove a top-level field, known or unknown, by JSON key."""
        if key in self.extras:
            self.extras.pop(key)
        elif key in FIELDS_BY_KEY:
            setattr(self, FIELDS_BY_KEY[key].attr, None)
            self.originals.pop(key, None)
        if key in self.key_order:
            self.key_order.remove(key)
