"""
Version Guard - Minimum tooling versions required before a build.

Reads installed package versions from the project's node_modules and
raises VersionTooLow when the framework or the TypeScript compiler is
older than what the build supports.
"""

import json
import logging
import re
from pathlib import Path
from typing import Optional, Protocol

from .errors import VersionTooLow

logger = logging.getLogger(__name__)

MINIMUM_FRAMEWORK_VERSION = (2, 3, 1)

# Framework major -> minimum TypeScript version
MINIMUM_COMPILER_VERSIONS = {
	2: (2, 0, 0),
	4: (2, 0, 0),
	5: (2, 4, 0),
	6: (2, 7, 0),
}

_VERSION_PATTERN = re.compile(r"^\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def parse_version(text: str) -> tuple[int, int, int]:
	"""Parse the numeric core of a version string (``5.0.0-rc.1`` -> ``(5, 0, 0)``)."""
	match = _VERSION_PATTERN.match(text) if isinstance(text, str) else None
	if not match:
		raise ValueError(f"Unrecognized version: {text!r}")
	return tuple(int(part or 0) for part in match.groups())


def format_version(version: tuple[int, ...]) -> str:
	return ".".join(str(part) for part in version)


def minimum_compiler_version(framework_version: tuple[int, int, int]) -> tuple[int, int, int]:
	"""Minimum TypeScript version for a given framework version."""
	major = framework_version[0]
	if major in MINIMUM_COMPILER_VERSIONS:
		return MINIMUM_COMPILER_VERSIONS[major]
	if major > max(MINIMUM_COMPILER_VERSIONS):
		return MINIMUM_COMPILER_VERSIONS[max(MINIMUM_COMPILER_VERSIONS)]
	return MINIMUM_COMPILER_VERSIONS[min(MINIMUM_COMPILER_VERSIONS)]


class VersionGuard(Protocol):
	"""Precondition checks run before any build work."""

	def assert_minimum_framework_version(self, project_root: Path) -> None:
		...

	def assert_minimum_compiler_version(self, project_root: Path) -> None:
		...


class NodeModulesVersionGuard:
	"""Checks versions recorded in ``node_modules/<package>/package.json``."""

	FRAMEWORK_PACKAGE = "@angular/core"
	COMPILER_PACKAGE = "typescript"

	def _installed_version(self, project_root: Path, package: str) -> Optional[str]:
		"""Version string from the package manifest, or None if not installed."""
		manifest = Path(project_root) / "node_modules" / package / "package.json"
		if not manifest.exists():
			return None
		try:
			data = json.loads(manifest.read_text(encoding="utf-8"))
		except (json.JSONDecodeError, IOError) as e:
			raise VersionTooLow(f"Could not read {manifest}: {e}") from e

		version = data.get("version") if isinstance(data, dict) else None
		if not isinstance(version, str):
			raise VersionTooLow(f"Could not read {manifest}: no \"version\" string")
		return version

	def _framework_version(self, project_root: Path) -> tuple[int, int, int]:
		raw = self._installed_version(project_root, self.FRAMEWORK_PACKAGE)
		if raw is None:
			raise VersionTooLow(
				f"You seem to not be depending on \"{self.FRAMEWORK_PACKAGE}\". "
				"This is an error."
			)
		try:
			return parse_version(raw)
		except ValueError as e:
			raise VersionTooLow(f"{self.FRAMEWORK_PACKAGE}: {e}") from e

	def assert_minimum_framework_version(self, project_root: Path) -> None:
		"""Raise VersionTooLow unless the framework is 2.3.1 or newer."""
		version = self._framework_version(project_root)
		if version < MINIMUM_FRAMEWORK_VERSION:
			raise VersionTooLow(
				f"This version of the build requires {self.FRAMEWORK_PACKAGE} "
				f"{format_version(MINIMUM_FRAMEWORK_VERSION)} or greater. "
				f"Current version is \"{format_version(version)}\"."
			)
		logger.debug(f"{self.FRAMEWORK_PACKAGE} {format_version(version)} OK")

	def assert_minimum_compiler_version(self, project_root: Path) -> None:
		"""Raise VersionTooLow unless TypeScript satisfies the framework's minimum."""
		raw = self._installed_version(project_root, self.COMPILER_PACKAGE)
		if raw is None:
			raise VersionTooLow(
				f"Could not find \"{self.COMPILER_PACKAGE}\" in node_modules. "
				"Please install it before building."
			)
		try:
			version = parse_version(raw)
		except ValueError as e:
			raise VersionTooLow(f"{self.COMPILER_PACKAGE}: {e}") from e

		required = minimum_compiler_version(self._framework_version(project_root))
		if version < required:
			raise VersionTooLow(
				f"{self.FRAMEWORK_PACKAGE} requires {self.COMPILER_PACKAGE} "
				f"{format_version(required)} or greater but "
				f"{format_version(version)} was found instead."
			)
		logger.debug(f"{self.COMPILER_PACKAGE} {format_version(version)} OK")
