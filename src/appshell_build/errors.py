"""
Error classes for appshell-build runs.

Every error is fatal to the run that raised it: the orchestrator
recovers from nothing and surfaces the first failure to the caller.

- VersionTooLow: project tooling is older than the supported minimum
- SelectorNotFound: the app selector does not match a declared app
- PlatformMismatch: the app shell points at a non-server application
- BuildFailed: the build task reported a failure
- RenderFailed: the app shell render task reported a failure
- ProjectConfigError: the project config file is missing or malformed
"""


class BuildOrchestratorError(Exception):
	"""Base exception for appshell-build."""
	pass


class VersionTooLow(BuildOrchestratorError):
	"""An installed framework or compiler version is below the minimum."""
	pass


class SelectorNotFound(BuildOrchestratorError):
	"""No application matches the given name or index."""
	pass


class PlatformMismatch(BuildOrchestratorError):
	"""The app shell's companion application is not a server application."""
	pass


class BuildFailed(BuildOrchestratorError):
	"""
	The build task failed.

	The original exception raised by the task, if any, is chained
	as ``__cause__``.
	"""

	def __init__(self, message: str, output: str = ""):
		super().__init__(message)
		self.output = output


class RenderFailed(BuildOrchestratorError):
	"""The app shell render task failed."""

	def __init__(self, message: str, output: str = ""):
		super().__init__(message)
		self.output = output


class ProjectConfigError(BuildOrchestratorError):
	"""The project configuration file is missing or malformed."""
	pass
