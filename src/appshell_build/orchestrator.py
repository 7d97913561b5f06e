"""
Build Orchestrator - Sequences the client build and the optional app shell pipeline.

Stages run strictly one after another:

    VALIDATING -> NORMALIZING -> RESOLVING -> BUILDING_CLIENT
        -> DONE
        -> BUILDING_SERVER -> RENDERING -> DONE

Any error moves the run to FAILED and is re-raised to the caller.
Whether the app shell pipeline runs is decided once, before the
client build starts.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from .errors import BuildFailed, BuildOrchestratorError, PlatformMismatch, RenderFailed
from .options import BuildOptions, normalize_deploy_url, shell_eligible
from .project import ApplicationDescriptor, ConfigResolver, Platform
from .tasks import BuildInvoker, RenderInvoker, RenderOptions
from .versions import NodeModulesVersionGuard, VersionGuard

logger = logging.getLogger(__name__)


class BuildStage(str, Enum):
	"""Stage of an orchestrator run."""
	VALIDATING = "validating"
	NORMALIZING = "normalizing"
	RESOLVING = "resolving"
	BUILDING_CLIENT = "building_client"
	BUILDING_SERVER = "building_server"
	RENDERING = "rendering"
	DONE = "done"
	FAILED = "failed"


StageCallback = Callable[[BuildStage], Awaitable[None]]


class BuildOrchestrator:
	"""
	Drives the build and render tasks for one project.

	The resolver, tasks and version guard are injected so each can be
	replaced independently. One orchestrator may serve several runs,
	but runs must not overlap.
	"""

	def __init__(
		self,
		resolver: ConfigResolver,
		build_task: BuildInvoker,
		render_task: RenderInvoker,
		project_root: Optional[Path] = None,
		version_guard: Optional[VersionGuard] = None,
	):
		"""
		Initialize the orchestrator.

		Args:
			resolver: Resolves app selectors to application descriptors
			build_task: Builds a single application
			render_task: Renders the app shell page
			project_root: Root that output paths are relative to
			version_guard: Tooling version checks (default: node_modules lookup)
		"""
		self.resolver = resolver
		self.build_task = build_task
		self.render_task = render_task
		self.project_root = Path(project_root) if project_root else Path.cwd()
		self.version_guard = version_guard or NodeModulesVersionGuard()
		self.stages: list[BuildStage] = []
		self._stage_callback: Optional[StageCallback] = None

	def set_stage_callback(self, callback: StageCallback) -> None:
		"""Set callback invoked with each stage as it is entered."""
		self._stage_callback = callback

	async def _enter(self, stage: BuildStage) -> None:
		self.stages.append(stage)
		logger.info(f"Build stage: {stage.value}")
		if self._stage_callback:
			try:
				await self._stage_callback(stage)
			except Exception as e:
				logger.warning(f"Stage callback failed for {stage.value}: {e}")

	async def run(self, options: BuildOptions) -> Any:
		"""
		Build the selected app, plus its app shell when one applies.

		Args:
			options: Build options, owned by this run; ``deploy_url`` is
				normalized in place

		Returns:
			The client build result, or the render result when the app
			shell pipeline ran
		"""
		self.stages = []
		try:
			return await self._run(options)
		except Exception as e:
			logger.error(f"Build failed: {e}")
			await self._enter(BuildStage.FAILED)
			raise

	async def _run(self, options: BuildOptions) -> Any:
		await self._enter(BuildStage.VALIDATING)
		self.version_guard.assert_minimum_framework_version(self.project_root)
		self.version_guard.assert_minimum_compiler_version(self.project_root)

		await self._enter(BuildStage.NORMALIZING)
		normalize_deploy_url(options)

		await self._enter(BuildStage.RESOLVING)
		client_app = self.resolver.resolve(options.app)
		do_app_shell = shell_eligible(options)

		server_app = None
		if client_app.app_shell and do_app_shell:
			server_app = self.resolver.resolve(client_app.app_shell.app)
			if server_app.platform != Platform.SERVER:
				raise PlatformMismatch(
					f"Shell app's platform is not \"server\" "
					f"(app '{server_app.label}' is \"{server_app.platform.value}\")"
				)
		elif client_app.app_shell:
			logger.debug("App shell declared but not eligible for this build, skipping")

		await self._enter(BuildStage.BUILDING_CLIENT)
		client_result = await self._build(options)
		if server_app is None:
			await self._enter(BuildStage.DONE)
			return client_result

		await self._enter(BuildStage.BUILDING_SERVER)
		server_options = options.replace(app=str(client_app.app_shell.app))
		await self._build(server_options)

		await self._enter(BuildStage.RENDERING)
		result = await self._render(self._render_options(client_app, server_app))
		await self._enter(BuildStage.DONE)
		return result

	def _render_options(
		self,
		client_app: ApplicationDescriptor,
		server_app: ApplicationDescriptor,
	) -> RenderOptions:
		# The render overwrites the client's index document in place
		index_path = self.project_root / client_app.out_dir / client_app.index
		return RenderOptions(
			input_index_path=index_path,
			route=client_app.app_shell.route,
			server_out_dir=self.project_root / server_app.out_dir,
			output_index_path=index_path,
		)

	async def _build(self, options: BuildOptions) -> Any:
		try:
			return await self.build_task.run(options)
		except BuildOrchestratorError:
			raise
		except Exception as e:
			raise BuildFailed(str(e)) from e

	async def _render(self, options: RenderOptions) -> Any:
		try:
			return await self.render_task.run(options)
		except BuildOrchestratorError:
			raise
		except Exception as e:
			raise RenderFailed(str(e)) from e
