"""Publisher constants and enumerations."""

from enum import StrEnum

DEFAULT_CONFIG_PATH = "publisher.yml"

# Cache layout: <user cache root>/publisher/repos/<owner>/<name>
CACHE_APP_DIR = "publisher"
REPOS_DIR = "repos"

CACHE_DIR_ENV = "PUBLISHER_CACHE_DIR"
LOG_FILE_ENV = "PUBLISHER_LOG_FILE"

DEFAULT_REMOTE = "origin"
GITHUB_SSH_URL = "git@github.com:{repo}.git"

GIT_DIR_NAME = ".git"
CNAME_FILE = "CNAME"

# Variables available to ${VAR} placeholders in the config file
VAR_SHA = "SHA"
VAR_TAG = "TAG"
VAR_DATE = "DATE"
DATE_FORMAT = "%m-%d-%Y"


class PublishStage(StrEnum):
    """Stages of the publish pipeline, in execution order."""

    RESOLVE_TARGET = "resolve_target"
    PREPARE_REPO = "prepare_repo"
    RUN_PRE_HOOK = "run_pre_hook"
    EMPTY_DIR = "empty_dir"
    RESOLVE_FILES = "resolve_files"
    COPY_FILES = "copy_files"
    WRITE_CNAME = "write_cname"
    COMMIT = "commit"
    PUSH = "push"
