"""Build options, project-level defaults, and the rules applied to them before a run."""

import dataclasses
import logging
import sys
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

PRODUCTION_TARGET = "production"
DEVELOPMENT_TARGET = "development"

OUTPUT_HASHING_VALUES = ("none", "all", "media", "bundles")
BUNDLE_DEPENDENCIES_VALUES = ("none", "all")


def _camel_case(name: str) -> str:
	head, *rest = name.split("_")
	return head + "".join(part.capitalize() for part in rest)


@dataclass
class BuildOptions:
	"""Flat record of build parameters for one run.

	``None`` means the caller left the option unset, which matters for
	``aot`` (see ``shell_eligible``) and for project defaults.
	"""

	target: str = DEVELOPMENT_TARGET
	environment: Optional[str] = None
	output_path: Optional[str] = None
	aot: Optional[bool] = None
	sourcemaps: Optional[bool] = None
	vendor_chunk: Optional[bool] = None
	common_chunk: Optional[bool] = None
	base_href: Optional[str] = None
	deploy_url: Optional[str] = None
	verbose: bool = False
	progress: Optional[bool] = None
	i18n_file: Optional[str] = None
	i18n_format: Optional[str] = None
	locale: Optional[str] = None
	missing_translation: Optional[str] = None
	extract_css: Optional[bool] = None
	watch: bool = False
	output_hashing: Optional[str] = None
	poll: Optional[int] = None
	app: Optional[str] = None
	delete_output_path: Optional[bool] = None
	preserve_symlinks: Optional[bool] = None
	extract_licenses: Optional[bool] = None
	show_circular_dependencies: Optional[bool] = None
	build_optimizer: Optional[bool] = None
	named_chunks: Optional[bool] = None
	subresource_integrity: bool = False
	bundle_dependencies: str = "none"
	service_worker: bool = True
	skip_app_shell: bool = False
	stats_json: bool = False

	def validate(self) -> None:
		"""Reject values outside the accepted choices."""
		if self.output_hashing is not None and self.output_hashing not in OUTPUT_HASHING_VALUES:
			raise ValueError(
				f"Invalid output-hashing '{self.output_hashing}', "
				f"expected one of: {', '.join(OUTPUT_HASHING_VALUES)}"
			)
		if self.bundle_dependencies not in BUNDLE_DEPENDENCIES_VALUES:
			raise ValueError(
				f"Invalid bundle-dependencies '{self.bundle_dependencies}', "
				f"expected one of: {', '.join(BUNDLE_DEPENDENCIES_VALUES)}"
			)

	def replace(self, **changes: Any) -> "BuildOptions":
		"""Return a copy with the given fields overridden."""
		return dataclasses.replace(self, **changes)

	def to_dict(self) -> dict[str, Any]:
		"""Set options keyed by their camelCase names."""
		return {
			_camel_case(f.name): getattr(self, f.name)
			for f in dataclasses.fields(self)
			if getattr(self, f.name) is not None
		}


def normalize_deploy_url(options: BuildOptions) -> BuildOptions:
	"""Append a trailing slash to the deploy URL when it is missing.

	Asset paths are concatenated directly onto the deploy URL, so
	``https://cdn/assets`` must become ``https://cdn/assets/``.
	"""
	if options.deploy_url and not options.deploy_url.endswith("/"):
		options.deploy_url += "/"
	return options


def shell_eligible(options: BuildOptions) -> bool:
	"""Whether these options allow the app shell pipeline to run.

	AOT left unset counts as enabled here, even though the build itself
	may treat an unset AOT flag as off.
	"""
	return (
		options.target == PRODUCTION_TARGET
		and options.aot in (None, True)
		and not options.skip_app_shell
	)


class BuildDefaults(BaseModel):
	"""Project-level build defaults from the ``defaults.build`` config block."""
	model_config = ConfigDict(populate_by_name=True)

	sourcemaps: Optional[bool] = Field(default=None)
	base_href: Optional[str] = Field(default=None, alias="baseHref")
	progress: Optional[bool] = Field(default=None)
	poll: Optional[int] = Field(default=None, description="Watch poll period in milliseconds")
	delete_output_path: Optional[bool] = Field(default=None, alias="deleteOutputPath")
	preserve_symlinks: Optional[bool] = Field(default=None, alias="preserveSymlinks")
	show_circular_dependencies: Optional[bool] = Field(default=None, alias="showCircularDependencies")
	common_chunk: Optional[bool] = Field(default=None, alias="commonChunk")
	named_chunks: Optional[bool] = Field(default=None, alias="namedChunks")

	def apply(self, options: BuildOptions, is_tty: Optional[bool] = None) -> BuildOptions:
		"""Fill options the caller left unset with project defaults."""
		for attr in type(self).model_fields:
			default = getattr(self, attr)
			if default is not None and getattr(options, attr) is None:
				setattr(options, attr, default)

		if options.progress is None:
			if is_tty is None:
				is_tty = sys.stdout.isatty()
			options.progress = is_tty

		logger.debug(f"Applied project build defaults: {self}")
		return options
