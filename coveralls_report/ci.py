"""CI environment detection.

Usage:
    git = resolve_git_info()                  # reads os.environ
    git = resolve_git_info({"CIRCLECI": "true", "CIRCLE_SHA1": "abc"})

Each supported provider is identified by a marker variable. Providers are
checked in table order and the first marker present wins.
"""

import os
from collections.abc import Mapping
from typing import NamedTuple

from coveralls_report.models import GitInfo, Head


class Provider(NamedTuple):
    name: str
    marker: str
    branch: str
    # Head field -> environment variable; fields left out stay empty
    head: dict[str, str]


PROVIDERS: tuple[Provider, ...] = (
    Provider(
        name="circleci",
        marker="CIRCLECI",
        branch="CIRCLE_BRANCH",
        head={
            "id": "CIRCLE_SHA1",
            "author_name": "CIRCLE_USERNAME",
            "committer_name": "CIRCLE_USERNAME",
        },
    ),
    Provider(
        name="buildkite",
        marker="BUILDKITE",
        branch="BUILDKITE_BRANCH",
        head={
            "id": "BUILDKITE_COMMIT",
            "author_name": "BUILDKITE_BUILD_CREATOR",
            "author_email": "BUILDKITE_BUILD_CREATOR_EMAIL",
            "committer_name": "BUILDKITE_BUILD_CREATOR",
            "committer_email": "BUILDKITE_BUILD_CREATOR_EMAIL",
            "message": "BUILDKITE_MESSAGE",
        },
    ),
)


def detect_provider(environ: Mapping[str, str] | None = None) -> Provider | None:
    """Return the first provider whose marker variable is set, or None."""
    env = os.environ if environ is None else environ
    for provider in PROVIDERS:
        # Presence is enough: CIRCLECI="" still counts
        if provider.marker in env:
            return provider
    return None


def resolve_git_info(environ: Mapping[str, str] | None = None) -> GitInfo | None:
    """Build commit metadata from the CI environment.

    Returns None outside a recognised CI provider. Variables the provider did
    not set come back as empty strings.
    """
    env = os.environ if environ is None else environ
    provider = detect_provider(env)
    if provider is None:
        return None

    head = Head(**{f: env.get(var) or "" for f, var in provider.head.items()})
    return GitInfo(head=head, branch=env.get(provider.branch) or "")
