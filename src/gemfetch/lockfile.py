"""Structured lockfile document consumed by the fetch pipeline.

Parsing ``Gemfile.lock`` text is done elsewhere; this module only describes
the resolved result: a list of gem sources, each with exact gem versions.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class GemVersion:
    """A gem name pinned to an exact version."""

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}-{self.version}"


@dataclass(frozen=True)
class Spec:
    """One resolved package record from a gem source."""

    gem_version: GemVersion

    @property
    def name(self) -> str:
        return self.gem_version.name

    @property
    def version(self) -> str:
        return self.gem_version.version

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Spec":
        """Build a Spec from ``{"name": ..., "version": ...}``.

        Raises:
            ValueError: If name or version is missing or empty.
        """
        name = data.get("name")
        version = data.get("version")
        if not name or not version:
            raise ValueError(f"Gem spec requires a name and a version, got {dict(data)!r}")
        return cls(gem_version=GemVersion(str(name), str(version)))


@dataclass(frozen=True)
class GemSection:
    """All specs served by one remote gem server."""

    remote: str
    specs: tuple[Spec, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GemSection":
        """Build a GemSection from ``{"remote": ..., "specs": [...]}``."""
        remote = data.get("remote")
        if not remote:
            raise ValueError("Gem section requires a remote")
        return cls(
            remote=str(remote),
            specs=tuple(Spec.from_dict(spec) for spec in data.get("specs", ())),
        )


@dataclass(frozen=True)
class GemfileLock:
    """A resolved lockfile: gem sources in declaration order."""

    gem: tuple[GemSection, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GemfileLock":
        """Build a GemfileLock from ``{"gem": [section, ...]}``."""
        return cls(gem=tuple(GemSection.from_dict(section) for section in data.get("gem", ())))

    def specs(self) -> list[Spec]:
        """Return every spec across all sections, in order."""
        return [spec for section in self.gem for spec in section.specs]
