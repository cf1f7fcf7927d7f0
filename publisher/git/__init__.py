"""Publisher git package -- structured git operations.

Re-exports core classes for convenient access:
    from publisher.git import GitRunner, TargetRepository
"""

from publisher.git.base import GitIdentity, GitRunner, global_identity, rev_parse, root_dir
from publisher.git.repository import TargetRepository

__all__ = [
    "GitIdentity",
    "GitRunner",
    "TargetRepository",
    "global_identity",
    "rev_parse",
    "root_dir",
]
