"""Publish orchestration: one target, one run, strictly sequential."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath

from publisher.config import DeploymentTarget, PublisherConfig
from publisher.constants import (
    DATE_FORMAT,
    DEFAULT_CONFIG_PATH,
    VAR_DATE,
    VAR_SHA,
    VAR_TAG,
    PublishStage,
)
from publisher.exceptions import GitError, PublishError, PublisherError
from publisher.fs_utils import repos_dir
from publisher.git import TargetRepository, rev_parse, root_dir
from publisher.hooks import run_pre_run_script
from publisher.logging import get_logger
from publisher.sync import WorkspaceSynchronizer, apply_exclusions, resolve_file_set

STAGE_DESCRIPTIONS: dict[PublishStage, str] = {
    PublishStage.RESOLVE_TARGET: "failed to resolve deployment target",
    PublishStage.PREPARE_REPO: "failed to prepare target git repo",
    PublishStage.RUN_PRE_HOOK: "preRun script failed",
    PublishStage.EMPTY_DIR: "failed to empty target repo",
    PublishStage.RESOLVE_FILES: "failed to parse files listed in config",
    PublishStage.COPY_FILES: "failed to copy files",
    PublishStage.WRITE_CNAME: "failed to write CNAME file",
    PublishStage.COMMIT: "failed to commit files in target repo",
    PublishStage.PUSH: "failed to push changes to GitHub",
}


@dataclass(frozen=True)
class PublishOptions:
    """Per-run settings supplied on the command line."""

    target: str
    config_path: Path = Path(DEFAULT_CONFIG_PATH)
    skip_pre_run: bool = False
    tag: str = ""
    verbose: bool = False


@dataclass
class PublishResult:
    """Outcome of a completed publish."""

    target: str
    repo_path: Path
    commit_sha: str | None
    files: list[PurePosixPath] = field(default_factory=list)


def build_variables(sha: str, tag: str = "", now: datetime | None = None) -> dict[str, str]:
    """Values for the ``${SHA}``, ``${TAG}`` and ``${DATE}`` placeholders."""
    now = now or datetime.now()
    return {
        VAR_SHA: sha,
        VAR_TAG: tag,
        VAR_DATE: now.strftime(DATE_FORMAT),
    }


class Publisher:
    """Runs the publish pipeline for a single deployment target.

    Stages, in order: resolve the target, prepare the cached clone, run
    the preRun script, empty the clone, resolve and copy the configured
    files, write ``CNAME``, commit and push. The first failing stage
    aborts the run with a :class:`PublishError` chained to the cause.
    """

    def __init__(
        self,
        config: PublisherConfig,
        options: PublishOptions,
        source_root: Path,
        repos_root: Path,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.options = options
        self.source_root = Path(source_root)
        self.repos_root = Path(repos_root)
        self.logger = logger or get_logger("publish")

    @classmethod
    def from_options(
        cls,
        options: PublishOptions,
        cwd: Path | None = None,
        logger: logging.Logger | None = None,
    ) -> Publisher:
        """Build a publisher for the git project enclosing *cwd*.

        Discovers the project root and HEAD SHA, then loads the config
        with ``SHA``, ``TAG`` and ``DATE`` substituted.

        Raises:
            GitError: If *cwd* is not inside a git repository
            ConfigurationError: If the config cannot be loaded
        """
        logger = logger or get_logger("publish")
        try:
            source_root = root_dir(cwd)
        except GitError as e:
            raise GitError(
                f"failed to get root directory of git repo: {e.message}",
                command=e.command,
                exit_code=e.exit_code,
            ) from e
        try:
            sha = rev_parse("HEAD", cwd=source_root)
        except GitError as e:
            raise GitError(
                f"failed to get SHA of HEAD for project: {e.message}",
                command=e.command,
                exit_code=e.exit_code,
            ) from e

        logger.debug(f"Reading {options.config_path} config")
        variables = build_variables(sha, options.tag)
        config = PublisherConfig.load(options.config_path, variables)
        return cls(config, options, source_root, repos_dir(), logger)

    @contextmanager
    def _stage(self, stage: PublishStage) -> Iterator[None]:
        self.logger.debug(f"Stage {stage}", extra={"stage": str(stage), "target": self.options.target})
        try:
            yield
        except (PublisherError, OSError) as e:
            raise PublishError(f"{STAGE_DESCRIPTIONS[stage]}: {e}", stage=str(stage)) from e

    def resolve_target(self) -> DeploymentTarget:
        with self._stage(PublishStage.RESOLVE_TARGET):
            return self.config.get_target(self.options.target)

    def run(self) -> PublishResult:
        """Execute every stage of the pipeline.

        Returns:
            PublishResult describing the pushed commit

        Raises:
            PublishError: If any stage fails
        """
        target = self.resolve_target()
        repo_path = self.repos_root / target.github_repo
        self.logger.info(
            f"Publishing target {self.options.target} to {target.github_repo}:{target.branch}",
            extra={"target": self.options.target, "repo": target.github_repo},
        )

        with self._stage(PublishStage.PREPARE_REPO):
            self.repos_root.mkdir(parents=True, exist_ok=True)
            repo = TargetRepository.prepare(
                target.github_repo,
                repo_path,
                target.branch,
                remote_url=target.remote_url,
                logger=get_logger("git.repository"),
            )

        if self.config.pre_run_script and not self.options.skip_pre_run:
            with self._stage(PublishStage.RUN_PRE_HOOK):
                self.logger.info("Executing preRun script...")
                run_pre_run_script(self.config.pre_run_script, self.source_root, logger=self.logger)

        synchronizer = WorkspaceSynchronizer(repo.repo_path, logger=get_logger("sync"))
        with self._stage(PublishStage.EMPTY_DIR):
            synchronizer.empty_working_directory()

        with self._stage(PublishStage.RESOLVE_FILES):
            files = resolve_file_set(self.config.files, self.source_root)
            files = apply_exclusions(files, self.config.excluded_files, self.source_root)
        if not files:
            self.logger.warning("No files matched the configured patterns")

        with self._stage(PublishStage.COPY_FILES):
            self.logger.info("Copying files...")
            copied = synchronizer.copy_all(files, self.source_root)

        if target.custom_url:
            with self._stage(PublishStage.WRITE_CNAME):
                synchronizer.write_custom_domain_marker(target.custom_url)

        with self._stage(PublishStage.COMMIT):
            self.logger.debug("Committing files...")
            commit_sha = repo.commit_changes(self.config.commit_message)

        with self._stage(PublishStage.PUSH):
            self.logger.info(f"Pushing to branch {target.branch} in repo {target.github_repo}")
            repo.push()

        return PublishResult(
            target=self.options.target,
            repo_path=repo.repo_path,
            commit_sha=commit_sha,
            files=copied,
        )
