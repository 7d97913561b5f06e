"""Tests for build options, defaults, and eligibility rules."""

import pytest
from pydantic import ValidationError

from appshell_build.options import (
	BuildDefaults,
	BuildOptions,
	normalize_deploy_url,
	shell_eligible,
)


class TestNormalizeDeployUrl:
	"""Trailing slash handling for deploy URLs."""

	@pytest.mark.parametrize("url,expected", [
		("https://cdn.example.com/assets", "https://cdn.example.com/assets/"),
		("https://cdn.example.com/assets/", "https://cdn.example.com/assets/"),
		("static", "static/"),
		("/", "/"),
	])
	def test_normalize(self, url, expected):
		options = normalize_deploy_url(BuildOptions(deploy_url=url))
		assert options.deploy_url == expected

	def test_idempotent(self):
		options = BuildOptions(deploy_url="https://cdn.example.com/assets")
		normalize_deploy_url(options)
		normalize_deploy_url(options)
		assert options.deploy_url == "https://cdn.example.com/assets/"

	@pytest.mark.parametrize("url", [None, ""])
	def test_unset_left_alone(self, url):
		options = normalize_deploy_url(BuildOptions(deploy_url=url))
		assert options.deploy_url == url


class TestShellEligible:
	"""The three conditions gating the app shell pipeline."""

	def test_production_defaults_are_eligible(self):
		assert shell_eligible(BuildOptions(target="production")) is True

	def test_aot_unset_counts_as_enabled(self):
		"""Unset AOT is treated as enabled, matching aot=True rather than aot=False."""
		unset = shell_eligible(BuildOptions(target="production", aot=None))
		enabled = shell_eligible(BuildOptions(target="production", aot=True))
		disabled = shell_eligible(BuildOptions(target="production", aot=False))
		assert (unset, enabled, disabled) == (True, True, False)

	def test_development_target(self):
		assert shell_eligible(BuildOptions(target="development", aot=True)) is False

	def test_skip_app_shell(self):
		assert shell_eligible(BuildOptions(target="production", skip_app_shell=True)) is False


class TestBuildOptions:
	"""Validation, copying and serialization."""

	def test_defaults(self):
		options = BuildOptions()
		assert options.target == "development"
		assert options.aot is None
		assert options.service_worker is True
		assert options.skip_app_shell is False
		assert options.bundle_dependencies == "none"

	@pytest.mark.parametrize("mode", ["none", "all", "media", "bundles"])
	def test_valid_output_hashing(self, mode):
		BuildOptions(output_hashing=mode).validate()

	def test_invalid_output_hashing(self):
		with pytest.raises(ValueError, match="output-hashing"):
			BuildOptions(output_hashing="sometimes").validate()

	def test_invalid_bundle_dependencies(self):
		with pytest.raises(ValueError, match="bundle-dependencies"):
			BuildOptions(bundle_dependencies="some").validate()

	def test_replace_returns_copy(self):
		options = BuildOptions(app="client", deploy_url="/a/")
		copy = options.replace(app="ssr")
		assert copy.app == "ssr"
		assert copy.deploy_url == "/a/"
		assert options.app == "client"

	def test_to_dict_uses_camel_case_and_drops_unset(self):
		data = BuildOptions(deploy_url="/a/", i18n_file="messages.xlf").to_dict()
		assert data["deployUrl"] == "/a/"
		assert data["i18nFile"] == "messages.xlf"
		assert data["skipAppShell"] is False
		assert "aot" not in data
		assert "outputPath" not in data


class TestBuildDefaults:
	"""Project ``defaults.build`` handling."""

	def test_validate_camel_case(self):
		defaults = BuildDefaults.model_validate({
			"sourcemaps": False,
			"baseHref": "/app/",
			"namedChunks": True,
			"unknownKey": 1,
		})
		assert defaults.sourcemaps is False
		assert defaults.base_href == "/app/"
		assert defaults.named_chunks is True
		assert defaults.poll is None

	def test_validate_empty(self):
		assert BuildDefaults.model_validate({}) == BuildDefaults()

	def test_rejects_bad_types(self):
		with pytest.raises(ValidationError):
			BuildDefaults.model_validate({"poll": "fast"})

	def test_apply_fills_unset_only(self):
		defaults = BuildDefaults(sourcemaps=False, base_href="/app/", poll=500)
		options = BuildOptions(sourcemaps=True)

		defaults.apply(options, is_tty=False)

		assert options.sourcemaps is True
		assert options.base_href == "/app/"
		assert options.poll == 500

	def test_progress_falls_back_to_tty(self):
		options = BuildDefaults().apply(BuildOptions(), is_tty=True)
		assert options.progress is True

	def test_progress_from_project_beats_tty(self):
		options = BuildDefaults(progress=False).apply(BuildOptions(), is_tty=True)
		assert options.progress is False
