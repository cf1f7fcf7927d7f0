"""publisher - publish static sites to GitHub Pages.

Copies a project's build output into a cached clone of a deployment
target's repository, commits and pushes it.
"""

__version__ = "0.3.0"

from publisher.config import DeploymentTarget, PublisherConfig
from publisher.constants import PublishStage
from publisher.exceptions import PublisherError
from publisher.publish import PublishOptions, PublishResult, Publisher

__all__ = [
    "__version__",
    "DeploymentTarget",
    "PublisherConfig",
    "PublishStage",
    "PublisherError",
    "PublishOptions",
    "PublishResult",
    "Publisher",
]
