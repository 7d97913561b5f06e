"""appshell-build - Build orchestration with app shell pre-rendering."""

from .errors import (
	BuildFailed,
	BuildOrchestratorError,
	PlatformMismatch,
	ProjectConfigError,
	RenderFailed,
	SelectorNotFound,
	VersionTooLow,
)
from .options import BuildDefaults, BuildOptions, normalize_deploy_url, shell_eligible
from .orchestrator import BuildOrchestrator, BuildStage
from .project import ApplicationDescriptor, Platform, ProjectConfig, ShellDescriptor
from .tasks import CommandBuildTask, CommandRenderTask, RenderOptions

__all__ = [
	"BuildOrchestrator",
	"BuildStage",
	"BuildOptions",
	"BuildDefaults",
	"normalize_deploy_url",
	"shell_eligible",
	"ApplicationDescriptor",
	"ShellDescriptor",
	"Platform",
	"ProjectConfig",
	"RenderOptions",
	"CommandBuildTask",
	"CommandRenderTask",
	"BuildOrchestratorError",
	"VersionTooLow",
	"SelectorNotFound",
	"PlatformMismatch",
	"BuildFailed",
	"RenderFailed",
	"ProjectConfigError",
]
