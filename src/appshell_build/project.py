"""
Project Configuration - Pydantic schemas for the project's declared applications.

The project config file (``.angular-cli.json``) declares an ``apps``
array and an optional ``defaults`` block. ``ProjectConfig`` is loaded
once per run and resolves app selectors to application descriptors.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ProjectConfigError, SelectorNotFound
from .options import BuildDefaults

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAMES = (".angular-cli.json", "angular-cli.json")

_INDEX_PATTERN = re.compile(r"^[0-9]+$")

AppSelector = Union[str, int, None]


class Platform(str, Enum):
	"""Platform an application is built for."""
	BROWSER = "browser"
	SERVER = "server"


class ShellDescriptor(BaseModel):
	"""App shell declaration on a browser application."""
	model_config = ConfigDict(populate_by_name=True)

	app: Union[str, int] = Field(description="Name or index of the server application")
	route: str = Field(description="Route rendered into the shell page")


class ApplicationDescriptor(BaseModel):
	"""A single application declared in the project config."""
	model_config = ConfigDict(populate_by_name=True)

	name: Optional[str] = Field(default=None, description="Application name used as a selector")
	root: str = Field(default="src", description="Source root of the application")
	out_dir: str = Field(default="dist", alias="outDir", description="Build output directory")
	index: str = Field(default="index.html", description="Index document inside out_dir")
	platform: Platform = Field(default=Platform.BROWSER)
	app_shell: Optional[ShellDescriptor] = Field(default=None, alias="appShell")

	@property
	def label(self) -> str:
		return self.name or self.root


class ProjectDefaults(BaseModel):
	"""The ``defaults`` block; only ``build`` is read, other sections are ignored."""
	model_config = ConfigDict(populate_by_name=True)

	build: BuildDefaults = Field(default_factory=BuildDefaults)


class ConfigResolver(Protocol):
	"""Resolves an app selector to an application descriptor."""

	def resolve(self, selector: AppSelector = None) -> ApplicationDescriptor:
		...


class ProjectConfig(BaseModel):
	"""
	The project's config file contents.

	``root`` is the directory holding the config file; build output
	paths are relative to it.
	"""
	model_config = ConfigDict(populate_by_name=True)

	apps: list[ApplicationDescriptor] = Field(default_factory=list)
	defaults: ProjectDefaults = Field(default_factory=ProjectDefaults)
	root: Path = Field(default_factory=Path.cwd, exclude=True)
	source: str = Field(default=".angular-cli.json", exclude=True)

	@classmethod
	def load(cls, path: Path) -> "ProjectConfig":
		"""Load and validate a project config file."""
		path = Path(path)
		if not path.exists():
			raise ProjectConfigError(f"Project config not found: {path}")

		try:
			config = cls.model_validate_json(path.read_text(encoding="utf-8"))
		except ValidationError as e:
			raise ProjectConfigError(f"Invalid project config {path}: {e}") from e

		config.root = path.parent.resolve()
		config.source = path.name
		logger.debug(f"Loaded {len(config.apps)} app(s) from {path}")
		return config

	@property
	def build_defaults(self) -> BuildDefaults:
		"""Defaults from the ``defaults.build`` block."""
		return self.defaults.build

	def resolve(self, selector: AppSelector = None) -> ApplicationDescriptor:
		"""
		Resolve an app by name or index.

		A selector of all digits is a position in ``apps``; any other
		string is matched against app names. No selector means the
		first declared app.

		Raises:
			SelectorNotFound: If no app matches, or none are declared
		"""
		if not self.apps:
			raise SelectorNotFound(f"Unable to find any apps in `{self.source}`.")

		if selector is None or selector == "":
			return self.apps[0]

		if isinstance(selector, int) or _INDEX_PATTERN.match(selector):
			index = int(selector)
			if 0 <= index < len(self.apps):
				return self.apps[index]
		else:
			for app in self.apps:
				if app.name == selector:
					return app

		raise SelectorNotFound(
			f"Unable to find app with name or index '{selector}'. "
			f"Verify the configuration in `{self.source}`"
		)


def find_project_config(
	start: Optional[Path] = None,
	names: tuple[str, ...] = PROJECT_CONFIG_NAMES,
) -> Optional[Path]:
	"""Walk up from ``start`` looking for a project config file."""
	current = Path(start or Path.cwd()).resolve()
	for directory in (current, *current.parents):
		for name in names:
			candidate = directory / name
			if candidate.is_file():
				return candidate
	return None
