"""Tests for publisher configuration module."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from publisher.config import DeploymentTarget, PublisherConfig
from publisher.exceptions import ConfigurationError

SAMPLE = {
    "message": "Deploy ${SHA} ${TAG} on ${DATE}",
    "exclude": ["dist/*.map"],
    "files": ["dist/**", "LICENSE"],
    "preRun": "npm run build",
    "targets": {
        "prod": {"branch": "gh-pages", "repo": "acme/site", "url": "example.com"},
        "staging": {"branch": "staging", "repo": "acme/site-staging"},
    },
}

VARIABLES = {"SHA": "abc123", "TAG": "v1.0.0", "DATE": "10-19-2026"}


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "publisher.yml"
    path.write_text(yaml.safe_dump(SAMPLE))
    return path


class TestDeploymentTarget:
    """Tests for DeploymentTarget model."""

    def test_aliases(self) -> None:
        """Test YAML keys map onto the model fields."""
        target = DeploymentTarget.model_validate({"branch": "gh-pages", "repo": "acme/site", "url": "a.io"})
        assert target.github_repo == "acme/site"
        assert target.custom_url == "a.io"

    def test_url_optional(self) -> None:
        """Test the custom URL defaults to empty, also when null in YAML."""
        assert DeploymentTarget(branch="main", repo="a/b").custom_url == ""
        assert DeploymentTarget.model_validate({"branch": "main", "repo": "a/b", "url": None}).custom_url == ""

    def test_remote_url_default(self) -> None:
        """Test the remote defaults to GitHub over SSH."""
        target = DeploymentTarget(branch="gh-pages", repo="acme/site")
        assert target.remote_url == "git@github.com:acme/site.git"

    def test_remote_url_override(self) -> None:
        """Test an explicit remote wins."""
        target = DeploymentTarget(branch="gh-pages", repo="acme/site", remote="https://git.example.com/site.git")
        assert target.remote_url == "https://git.example.com/site.git"

    @pytest.mark.parametrize("repo", ["site", "acme/site/extra", "../site", "acme/ site", ""])
    def test_repo_must_be_owner_name(self, repo: str) -> None:
        """Test repo identifiers other than owner/name are rejected."""
        with pytest.raises(ValidationError):
            DeploymentTarget(branch="main", repo=repo)

    def test_branch_required(self) -> None:
        """Test the branch is required and non-empty."""
        with pytest.raises(ValidationError):
            DeploymentTarget.model_validate({"repo": "a/b"})
        with pytest.raises(ValidationError):
            DeploymentTarget(branch="", repo="a/b")

    def test_immutable(self) -> None:
        """Test targets cannot be modified once loaded."""
        target = DeploymentTarget(branch="main", repo="a/b")
        with pytest.raises(ValidationError):
            target.branch = "other"  # type: ignore[misc]


class TestPublisherConfigLoad:
    """Tests for loading PublisherConfig from YAML."""

    def test_load(self, config_file: Path) -> None:
        """Test all fields are loaded and variables substituted."""
        config = PublisherConfig.load(config_file, VARIABLES)

        assert config.commit_message == "Deploy abc123 v1.0.0 on 10-19-2026"
        assert config.excluded_files == ["dist/*.map"]
        assert config.files == ["dist/**", "LICENSE"]
        assert config.pre_run_script == "npm run build"
        assert set(config.targets) == {"prod", "staging"}
        assert config.targets["prod"].custom_url == "example.com"

    def test_load_keeps_file_order(self, config_file: Path) -> None:
        """Test the files list keeps its configured order."""
        config = PublisherConfig.load(config_file, VARIABLES)
        assert config.files[0] == "dist/**"

    def test_load_without_variables(self, config_file: Path) -> None:
        """Test placeholders stay verbatim when no variables are supplied."""
        config = PublisherConfig.load(config_file)
        assert config.commit_message == SAMPLE["message"]

    def test_load_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            PublisherConfig.load(tmp_path / "missing.yml")
        assert "config file not found" in str(exc_info.value)

    def test_load_invalid_yaml(self, tmp_path: Path) -> None:
        """Test malformed YAML raises ConfigurationError."""
        path = tmp_path / "publisher.yml"
        path.write_text("targets: [unclosed\n")
        with pytest.raises(ConfigurationError, match="failed to parse"):
            PublisherConfig.load(path)

    def test_load_non_mapping(self, tmp_path: Path) -> None:
        """Test a YAML list at the top level is rejected."""
        path = tmp_path / "publisher.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            PublisherConfig.load(path)

    def test_load_invalid_schema(self, tmp_path: Path) -> None:
        """Test schema violations raise ConfigurationError."""
        path = tmp_path / "publisher.yml"
        path.write_text(yaml.safe_dump({"targets": {"prod": {"repo": "acme/site"}}}))
        with pytest.raises(ConfigurationError, match="invalid config"):
            PublisherConfig.load(path)

    def test_load_undefined_variable(self, tmp_path: Path) -> None:
        """Test an unknown placeholder raises ConfigurationError."""
        path = tmp_path / "publisher.yml"
        path.write_text(yaml.safe_dump({"message": "Deploy ${VERSION}"}))
        with pytest.raises(ConfigurationError):
            PublisherConfig.load(path, VARIABLES)

    def test_load_empty_file(self, tmp_path: Path) -> None:
        """Test an empty file yields the defaults."""
        path = tmp_path / "publisher.yml"
        path.write_text("")
        config = PublisherConfig.load(path)
        assert config.targets == {}
        assert config.pre_run_script == ""

    def test_from_dict_null_prerun(self) -> None:
        """Test an explicit null preRun means no script."""
        config = PublisherConfig.from_dict({"preRun": None})
        assert config.pre_run_script == ""


class TestGetTarget:
    """Tests for target resolution."""

    def test_every_target_resolves_unchanged(self, config_file: Path) -> None:
        """Test each configured name yields its own record."""
        config = PublisherConfig.load(config_file, VARIABLES)
        for name, target in config.targets.items():
            assert config.get_target(name) is target

    def test_unknown_target(self, config_file: Path) -> None:
        """Test an absent name raises ConfigurationError listing the choices."""
        config = PublisherConfig.load(config_file, VARIABLES)
        with pytest.raises(ConfigurationError) as exc_info:
            config.get_target("qa")
        assert "qa is not a valid deployment target" in str(exc_info.value)
        assert exc_info.value.details["targets"] == ["prod", "staging"]
