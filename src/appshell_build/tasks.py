"""
Task invokers - the build and app shell render steps.

The orchestrator only depends on the BuildInvoker and RenderInvoker
protocols. CommandBuildTask and CommandRenderTask implement them by
running an external command, passing options as command line flags.
"""

import asyncio
import logging
import re
import shlex
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from .errors import BuildFailed, RenderFailed
from .options import BuildOptions

logger = logging.getLogger(__name__)


@dataclass
class RenderOptions:
	"""Inputs for rendering the app shell into the client's index document."""
	input_index_path: Path
	route: str
	server_out_dir: Path
	output_index_path: Path

	def to_dict(self) -> dict[str, str]:
		return {
			"inputIndexPath": str(self.input_index_path),
			"route": self.route,
			"serverOutDir": str(self.server_out_dir),
			"outputIndexPath": str(self.output_index_path),
		}


@dataclass
class TaskResult:
	"""Outcome of an external command run."""
	returncode: int
	output: str = ""
	duration_seconds: float = 0.0

	@property
	def success(self) -> bool:
		return self.returncode == 0


class BuildInvoker(Protocol):
	"""Builds one application."""

	async def run(self, options: BuildOptions) -> Any:
		...


class RenderInvoker(Protocol):
	"""Renders the app shell page from a server build."""

	async def run(self, options: RenderOptions) -> Any:
		...


def _kebab_case(name: str) -> str:
	return re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()


def options_to_args(values: dict[str, Any]) -> list[str]:
	"""Turn camelCase option values into ``--kebab-case`` flags."""
	args: list[str] = []
	for key, value in values.items():
		if value is None:
			continue
		flag = f"--{_kebab_case(key)}"
		if value is True:
			args.append(flag)
		elif value is False:
			args.append(f"{flag}=false")
		else:
			args.extend([flag, str(value)])
	return args


class _CommandTask:
	"""Runs an external command under the project root."""

	def __init__(
		self,
		command: Union[str, list[str]],
		project_root: Optional[str] = None,
		timeout: int = 1800,
	):
		"""
		Args:
			command: Command prefix, as a list or a shell-style string
			project_root: Working directory for the command
			timeout: Timeout in seconds
		"""
		self.command = shlex.split(command) if isinstance(command, str) else list(command)
		self.project_root = Path(project_root) if project_root else Path.cwd()
		self.timeout = timeout

	async def _run_command(self, cmd: list[str]) -> TaskResult:
		"""Run a command asynchronously."""
		start = datetime.now()
		logger.debug(f"Running: {shlex.join(cmd)}")

		try:
			proc = await asyncio.create_subprocess_exec(
				*cmd,
				stdout=asyncio.subprocess.PIPE,
				stderr=asyncio.subprocess.STDOUT,
				cwd=str(self.project_root),
			)
		except FileNotFoundError:
			return TaskResult(returncode=127, output=f"Command not found: {cmd[0]}")

		try:
			stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
		except asyncio.TimeoutError:
			proc.kill()
			await proc.wait()
			return TaskResult(
				returncode=-1,
				output=f"{cmd[0]} timed out after {self.timeout}s",
				duration_seconds=(datetime.now() - start).total_seconds(),
			)
		except asyncio.CancelledError:
			# Reap the child so no build keeps writing into the output path
			if proc.returncode is None:
				proc.kill()
			await proc.wait()
			raise

		return TaskResult(
			returncode=proc.returncode or 0,
			output=stdout.decode("utf-8", errors="replace"),
			duration_seconds=(datetime.now() - start).total_seconds(),
		)


class CommandBuildTask(_CommandTask):
	"""Builds an application by running an external build command."""

	async def run(self, options: BuildOptions) -> TaskResult:
		cmd = self.command + options_to_args(options.to_dict())
		result = await self._run_command(cmd)
		if not result.success:
			raise BuildFailed(
				f"Build of app '{options.app or 'default'}' failed "
				f"(exit code {result.returncode})",
				output=result.output,
			)
		logger.info(f"Built app '{options.app or 'default'}' in {result.duration_seconds:.1f}s")
		return result


class CommandRenderTask(_CommandTask):
	"""Renders the app shell by running an external render command."""

	async def run(self, options: RenderOptions) -> TaskResult:
		cmd = self.command + options_to_args(options.to_dict())
		result = await self._run_command(cmd)
		if not result.success:
			raise RenderFailed(
				f"Rendering route '{options.route}' failed (exit code {result.returncode})",
				output=result.output,
			)
		logger.info(f"Rendered app shell into {options.output_index_path}")
		return result
