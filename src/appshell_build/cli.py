"""CLI for appshell-build: build and apps commands."""

import argparse
import asyncio
import dataclasses
import sys
from pathlib import Path

from .config import Config, load_config
from .errors import BuildFailed, BuildOrchestratorError, RenderFailed
from .logging_config import setup_logging
from .options import BUNDLE_DEPENDENCIES_VALUES, OUTPUT_HASHING_VALUES, BuildOptions
from .orchestrator import BuildOrchestrator
from .project import PROJECT_CONFIG_NAMES, ProjectConfig, find_project_config
from .tasks import CommandBuildTask, CommandRenderTask

BOOL = argparse.BooleanOptionalAction

# (flags, dest, argparse kwargs) for every build option
BUILD_FLAGS = [
	(["--target", "-t"], "target", {"help": "Defines the build target (default: development)"}),
	(["--environment", "-e"], "environment", {"help": "Defines the build environment"}),
	(["--output-path", "-op"], "output_path", {"help": "Path where output will be placed"}),
	(["--aot"], "aot", {"action": BOOL, "help": "Build using Ahead of Time compilation"}),
	(["--sourcemaps", "-sm", "--sourcemap"], "sourcemaps", {"action": BOOL, "help": "Output sourcemaps"}),
	(["--vendor-chunk", "-vc"], "vendor_chunk", {
		"action": BOOL, "help": "Use a separate bundle containing only vendor libraries",
	}),
	(["--common-chunk", "-cc"], "common_chunk", {
		"action": BOOL, "help": "Use a separate bundle containing code used across multiple bundles",
	}),
	(["--base-href", "-bh"], "base_href", {"help": "Base url for the application being built"}),
	(["--deploy-url", "-d"], "deploy_url", {"help": "URL where files will be deployed"}),
	(["--verbose", "-v"], "verbose", {"action": BOOL, "help": "Adds more details to output logging"}),
	(["--progress", "-pr"], "progress", {"action": BOOL, "help": "Log progress to the console while building"}),
	(["--i18n-file"], "i18n_file", {"help": "Localization file to use for i18n"}),
	(["--i18n-format"], "i18n_format", {"help": "Format of the localization file"}),
	(["--locale"], "locale", {"help": "Locale to use for i18n"}),
	(["--missing-translation"], "missing_translation", {"help": "How to handle missing translations"}),
	(["--extract-css", "-ec"], "extract_css", {
		"action": BOOL, "help": "Extract css from global styles onto css files",
	}),
	(["--watch", "-w"], "watch", {"action": BOOL, "help": "Run build when files change"}),
	(["--output-hashing", "-oh"], "output_hashing", {
		"choices": OUTPUT_HASHING_VALUES, "help": "Output filename cache-busting hashing mode",
	}),
	(["--poll"], "poll", {"type": int, "help": "File watching poll time period (milliseconds)"}),
	(["--app", "-a"], "app", {"help": "Specifies app name or index to use"}),
	(["--delete-output-path", "-dop"], "delete_output_path", {
		"action": BOOL, "help": "Delete output path before build",
	}),
	(["--preserve-symlinks"], "preserve_symlinks", {
		"action": BOOL, "help": "Do not use the real path when resolving modules",
	}),
	(["--extract-licenses"], "extract_licenses", {
		"action": BOOL, "help": "Extract all licenses in a separate file",
	}),
	(["--show-circular-dependencies", "-scd"], "show_circular_dependencies", {
		"action": BOOL, "help": "Show circular dependency warnings on builds",
	}),
	(["--build-optimizer"], "build_optimizer", {"action": BOOL, "help": "Enable build optimizer with --aot"}),
	(["--named-chunks", "-nc"], "named_chunks", {
		"action": BOOL, "help": "Use file name for lazy loaded chunks",
	}),
	(["--subresource-integrity", "-sri"], "subresource_integrity", {
		"action": BOOL, "help": "Enables subresource integrity validation",
	}),
	(["--bundle-dependencies"], "bundle_dependencies", {
		"choices": BUNDLE_DEPENDENCIES_VALUES, "help": "Server platform only: external dependencies to bundle",
	}),
	(["--service-worker", "-sw"], "service_worker", {
		"action": BOOL, "help": "Generate a service worker config for production builds",
	}),
	(["--skip-app-shell"], "skip_app_shell", {"action": BOOL, "help": "Prevent building an app shell"}),
	(["--stats-json"], "stats_json", {"action": BOOL, "help": "Generate a stats.json file"}),
]


def options_from_args(args: argparse.Namespace) -> BuildOptions:
	"""Build options from parsed flags, leaving unset flags at their defaults."""
	values = {}
	for field in dataclasses.fields(BuildOptions):
		value = getattr(args, field.name, None)
		if value is not None:
			values[field.name] = value
	return BuildOptions(**values)


def _load_project(args: argparse.Namespace, config: Config) -> ProjectConfig:
	names = (config.project_config_name,) if config.project_config_name else PROJECT_CONFIG_NAMES
	path = find_project_config(Path(args.project) if args.project else None, names)
	if path is None:
		print(f"Error: no project config ({', '.join(names)}) found", file=sys.stderr)
		sys.exit(1)
	return ProjectConfig.load(path)


def cmd_build(args: argparse.Namespace) -> None:
	"""Build the selected app and its app shell."""
	config = load_config()
	setup_logging(
		level="DEBUG" if args.verbose else config.log_level,
		log_dir=config.log_dir,
	)

	try:
		project = _load_project(args, config)
		options = options_from_args(args)
		options.validate()
	except (BuildOrchestratorError, ValueError) as e:
		print(f"Error: {e}", file=sys.stderr)
		sys.exit(1)

	project.build_defaults.apply(options)

	orchestrator = BuildOrchestrator(
		resolver=project,
		build_task=CommandBuildTask(
			args.build_command or config.build_command,
			project_root=str(project.root),
			timeout=config.task_timeout,
		),
		render_task=CommandRenderTask(
			args.render_command or config.render_command,
			project_root=str(project.root),
			timeout=config.task_timeout,
		),
		project_root=project.root,
	)

	try:
		asyncio.run(orchestrator.run(options))
	except BuildOrchestratorError as e:
		if isinstance(e, (BuildFailed, RenderFailed)) and e.output:
			print(e.output, file=sys.stderr)
		print(f"Error: {e}", file=sys.stderr)
		sys.exit(1)

	print(f"Build complete ({' -> '.join(s.value for s in orchestrator.stages)})")


def cmd_apps(args: argparse.Namespace) -> None:
	"""List the apps declared in the project config."""
	config = load_config()
	try:
		project = _load_project(args, config)
	except BuildOrchestratorError as e:
		print(f"Error: {e}", file=sys.stderr)
		sys.exit(1)

	if not project.apps:
		print(f"No apps declared in {project.root / project.source}")
		return

	for index, app in enumerate(project.apps):
		shell = ""
		if app.app_shell:
			shell = f"  shell: {app.app_shell.route} via {app.app_shell.app}"
		print(f"  [{index}] {app.name or '-':16s} {app.platform.value:8s} {app.out_dir}{shell}")


def main(argv: list[str] | None = None) -> None:
	parser = argparse.ArgumentParser(
		prog="appshell-build",
		description="Build front-end apps and pre-render their app shell",
	)
	parser.add_argument("--project", type=str, default=None, help="Directory to search for the project config")
	subparsers = parser.add_subparsers(dest="command")

	# build
	build_parser = subparsers.add_parser("build", aliases=["b"], help="Build the app into the output path")
	for flags, dest, kwargs in BUILD_FLAGS:
		build_parser.add_argument(*flags, dest=dest, default=None, **kwargs)
	build_parser.add_argument("--build-command", type=str, default=None, help="Command that builds one app")
	build_parser.add_argument("--render-command", type=str, default=None, help="Command that renders the app shell")
	build_parser.set_defaults(func=cmd_build)

	# apps
	apps_parser = subparsers.add_parser("apps", help="List declared apps")
	apps_parser.set_defaults(func=cmd_apps)

	args = parser.parse_args(argv)

	if not args.command:
		parser.print_help()
		sys.exit(1)

	args.func(args)
