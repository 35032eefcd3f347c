# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Install catalog dependencies into staging directories."""

from __future__ import annotations

import hashlib
import logging
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path
from typing import Protocol

import requests

from .errors import InstallError
from .models import DependencyDescriptor

LOGGER = logging.getLogger(__name__)

DOWNLOAD_SUBDIR = "dependencies"
_CHUNK_SIZE = 1 << 16


class DependencyInstaller(Protocol):
    """Capability to place a dependency's contents into a directory."""

    def install(self, descriptor: DependencyDescriptor, target_dir: Path) -> None:
        """Download, verify and extract ``descriptor`` into ``target_dir``."""


class ArchiveInstaller:
    """Download dependencies with ``requests`` and unpack them.

    Downloads are cached under ``<cache_dir>/dependencies`` and re-used when the
    cached bytes still match the catalog checksum. Tarballs and zip files are
    extracted; any other artifact is copied into the target directory as-is.
    Installing into an existing directory overwrites matching files.
    """

    def __init__(self, cache_dir: Path, *, timeout: int = 300) -> None:
        """Configure the download cache and request timeout.

        Args:
            cache_dir: Buildpack cache directory.
            timeout: Seconds allowed for each download request.

        """

        self._cache_dir = cache_dir / DOWNLOAD_SUBDIR
        self._timeout = timeout

    def install(self, descriptor: DependencyDescriptor, target_dir: Path) -> None:
        """Fetch ``descriptor`` through the cache and unpack it into ``target_dir``.

        Raises:
            InstallError: If the download, checksum or extraction fails.

        """

        artifact = self._cached_artifact(descriptor)
        target_dir.mkdir(parents=True, exist_ok=True)
        try:
            self._unpack(artifact, target_dir, descriptor)
        except (OSError, tarfile.TarError, zipfile.BadZipFile) as exc:
            raise InstallError(f"{descriptor.name} {descriptor.version}: failed to extract: {exc}") from exc
        LOGGER.debug("installed %s %s into %s", descriptor.name, descriptor.version, target_dir)

    def _cached_artifact(self, descriptor: DependencyDescriptor) -> Path:
        """Return a verified local copy of ``descriptor``, downloading when needed."""

        destination = self._cache_dir / descriptor.name / descriptor.version / descriptor.filename
        if destination.is_file() and self._matches_checksum(descriptor, destination):
            LOGGER.debug("using cached %s", destination)
            return destination
        destination.parent.mkdir(parents=True, exist_ok=True)
        self._download(descriptor, destination)
        if not self._matches_checksum(descriptor, destination):
            destination.unlink(missing_ok=True)
            raise InstallError(f"{descriptor.name} {descriptor.version}: checksum mismatch for {descriptor.uri}")
        return destination

    def _download(self, descriptor: DependencyDescriptor, destination: Path) -> None:
        """Stream ``descriptor.uri`` into ``destination``."""

        try:
            response = requests.get(descriptor.uri, timeout=self._timeout, stream=True)
            response.raise_for_status()
            with destination.open("wb") as stream:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    stream.write(chunk)
        except requests.RequestException as exc:
            destination.unlink(missing_ok=True)
            raise InstallError(f"{descriptor.name} {descriptor.version}: download failed: {exc}") from exc

    @staticmethod
    def _matches_checksum(descriptor: DependencyDescriptor, path: Path) -> bool:
        """Return whether ``path`` matches the catalog SHA-256, if one is given."""

        if not descriptor.sha256:
            return True
        digest = hashlib.sha256()
        with path.open("rb") as stream:
            for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
        return digest.hexdigest() == descriptor.sha256

    @staticmethod
    def _unpack(artifact: Path, target_dir: Path, descriptor: DependencyDescriptor) -> None:
        """Extract tarballs and non-JAR zips; copy anything else as-is."""

        if tarfile.is_tarfile(artifact):
            with tarfile.open(artifact, "r:*") as archive:
                archive.extractall(target_dir, filter="data")
            return
        if zipfile.is_zipfile(artifact) and not artifact.name.endswith(".jar"):
            with zipfile.ZipFile(artifact) as archive:
                archive.extractall(target_dir)
            return
        destination = target_dir / descriptor.filename
        shutil.copyfile(artifact, destination)
        destination.chmod(destination.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


__all__ = ["ArchiveInstaller", "DependencyInstaller"]
