# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the staging engine."""

from __future__ import annotations

from collections.abc import Sequence


class BuildpackError(RuntimeError):
    """Base class for every error raised while staging an application."""


class AmbiguousMatchError(BuildpackError):
    """Raised when more than one mutually-exclusive layout matches inside one provider."""

    def __init__(self, category: str, provider: str, candidates: Sequence[str]) -> None:
        """Record the offending provider and the layouts it matched.

        Args:
            category: Provider category, such as ``container``.
            provider: Name of the provider that matched ambiguously.
            candidates: Descriptions of every layout found.

        """

        self.category = category
        self.provider = provider
        self.candidates = tuple(candidates)
        joined = ", ".join(self.candidates)
        super().__init__(f"{category} '{provider}' matched several mutually exclusive layouts: [{joined}]")


class NoMatchError(BuildpackError):
    """Raised when no provider in a mandatory category matches the application."""

    def __init__(self, category: str, detail: str | None = None) -> None:
        """Record the category that found no match.

        Args:
            category: Provider category left without a match.
            detail: Optional explanation appended to the message.

        """

        self.category = category
        message = f"no suitable {category} found for this application"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class VersionNotFoundError(BuildpackError):
    """Raised when a version constraint resolves to nothing in the catalog."""

    def __init__(self, constraint: str, catalog_name: str, available: Sequence[str] = ()) -> None:
        """Record the failed constraint and what the catalog offered.

        Args:
            constraint: Literal version or wildcard pattern that was requested.
            catalog_name: Dependency name searched.
            available: Versions the catalog holds for ``catalog_name``.

        """

        self.constraint = constraint
        self.catalog_name = catalog_name
        self.available = tuple(available)
        message = f"no version of '{catalog_name}' satisfies '{constraint}'"
        if self.available:
            message = f"{message} (available: {', '.join(self.available)})"
        super().__init__(message)


class MissingPriorStateError(BuildpackError):
    """Raised when finalize cannot find, or disagrees with, what supply recorded."""


class NonFatalToolingError(BuildpackError):
    """Raised for optional tooling failures that are logged and skipped."""


class ConfigurationError(BuildpackError):
    """Raised when user supplied configuration cannot be interpreted."""


class InstallError(BuildpackError):
    """Raised when a dependency cannot be downloaded, verified or extracted."""


class CatalogIntegrityError(BuildpackError):
    """Raised when catalog metadata violates its consistency rules."""


class CatalogValidationError(BuildpackError):
    """Raised when a catalog document fails structural schema validation."""


__all__ = (
    "AmbiguousMatchError",
    "BuildpackError",
    "CatalogIntegrityError",
    "CatalogValidationError",
    "ConfigurationError",
    "InstallError",
    "MissingPriorStateError",
    "NoMatchError",
    "NonFatalToolingError",
    "VersionNotFoundError",
)
