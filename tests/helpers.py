"""Shared test fakes and helpers for appshell-build tests."""

import json
from pathlib import Path
from typing import Any, Optional

from appshell_build.options import BuildOptions
from appshell_build.project import ApplicationDescriptor, ProjectConfig, ShellDescriptor
from appshell_build.tasks import RenderOptions


class CallLog:
	"""Records the order of calls across several fakes."""

	def __init__(self):
		self.calls: list[tuple[str, Any]] = []

	def names(self) -> list[str]:
		return [name for name, _ in self.calls]


class FakeBuildTask:
	"""Build task that records the options it was called with."""

	def __init__(self, log: Optional[CallLog] = None, fail_on: Optional[str] = None, error: Optional[Exception] = None):
		self.log = log or CallLog()
		self.fail_on = fail_on
		self.error = error or RuntimeError("compilation failed")
		self.calls: list[BuildOptions] = []

	async def run(self, options: BuildOptions) -> dict:
		self.calls.append(options)
		self.log.calls.append(("build", options))
		if self.fail_on is not None and options.app == self.fail_on:
			raise self.error
		return {"built": options.app}


class FakeRenderTask:
	"""Render task that records its options."""

	def __init__(self, log: Optional[CallLog] = None, error: Optional[Exception] = None):
		self.log = log or CallLog()
		self.error = error
		self.calls: list[RenderOptions] = []

	async def run(self, options: RenderOptions) -> dict:
		self.calls.append(options)
		self.log.calls.append(("render", options))
		if self.error is not None:
			raise self.error
		return {"rendered": options.route}


class FakeVersionGuard:
	"""Version guard that passes, or raises a preset error."""

	def __init__(self, framework_error: Optional[Exception] = None, compiler_error: Optional[Exception] = None):
		self.framework_error = framework_error
		self.compiler_error = compiler_error
		self.checked: list[str] = []

	def assert_minimum_framework_version(self, project_root: Path) -> None:
		self.checked.append("framework")
		if self.framework_error:
			raise self.framework_error

	def assert_minimum_compiler_version(self, project_root: Path) -> None:
		self.checked.append("compiler")
		if self.compiler_error:
			raise self.compiler_error


def make_project(
	root: Optional[Path] = None,
	shell_route: Optional[str] = "/",
	server_platform: str = "server",
) -> ProjectConfig:
	"""A browser app ``client`` and a companion app ``ssr``.

	Pass ``shell_route=None`` for a client app without an app shell.
	"""
	app_shell = ShellDescriptor(app="ssr", route=shell_route) if shell_route is not None else None
	return ProjectConfig(
		apps=[
			ApplicationDescriptor(
				name="client",
				out_dir="dist/browser",
				index="index.html",
				app_shell=app_shell,
			),
			ApplicationDescriptor(
				name="ssr",
				out_dir="dist/server",
				platform=server_platform,
			),
		],
		root=root or Path("/project"),
	)


def write_project_config(path: Path, data: dict) -> Path:
	"""Write a project config file and return its path."""
	config_file = path / ".angular-cli.json"
	config_file.write_text(json.dumps(data))
	return config_file


def write_package_version(root: Path, package: str, version: str) -> None:
	"""Create ``node_modules/<package>/package.json`` with a version."""
	package_dir = root / "node_modules" / package
	package_dir.mkdir(parents=True, exist_ok=True)
	(package_dir / "package.json").write_text(json.dumps({"name": package, "version": version}))
