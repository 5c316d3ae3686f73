"""Links from rendered files back to their upstream git repository.

Rendered files often live in a dotfiles repository. When they do, templates
can link to the file's web view through ``special.upstream_file`` and to the
repository through ``special.upstream_repo``. Repository information is
read with the ``git`` executable and memoized per repository root; any
failure is logged and leaves the links empty.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from hueforge.errors import UpstreamError

__all__ = [
    "DEFAULT_BRANCH",
    "GitInfo",
    "GitCache",
    "normalize_remote",
    "infer_url_pattern",
    "build_url",
    "extract_base_url",
]

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"

GITHUB_STYLE = "{base}/blob/{branch}/{file}"
GITLAB_STYLE = "{base}/-/blob/{branch}/{file}"
GITEA_STYLE = "{base}/src/branch/{branch}/{file}"
BITBUCKET_STYLE = "{base}/src/{branch}/{file}"

_BASE_SEPARATORS = ("/-/blob/", "/blob/", "/src/branch/", "/src/")

# user@host:path, as written by `git clone git@github.com:owner/repo.git`
_SCP_LIKE = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<path>(?!/).+)$")


@dataclass(slots=True, frozen=True)
class GitInfo:
    """What is known about one repository.

    Attributes:
        root: Absolute path of the working tree.
        remote_url: Remote normalized to ``https://host/path``.
        remote_host: Host part of the remote.
        default_branch: Branch ``origin/HEAD`` points at, or ``main``.
    """

    root: Path
    remote_url: str
    remote_host: str
    default_branch: str = DEFAULT_BRANCH


def normalize_remote(url: str) -> tuple[str, str]:
    """Return ``(https_url, host)`` for a git remote URL.

    Accepts ``https://``, ``ssh://``, ``git://`` and scp-like
    (``git@host:owner/repo.git``) remotes.

    Raises:
        UpstreamError: No host can be found in ``url``.
    """

    raw = url.strip()
    if "://" in raw:
        parts = urlsplit(raw)
        host = parts.hostname
        path = parts.path
    else:
        match = _SCP_LIKE.match(raw)
        if match is None:
            raise UpstreamError(f"failed to parse git url `{url}`")
        host = match.group("host")
        path = match.group("path")
    if not host:
        raise UpstreamError(f"failed to get the host in git url `{url}`")
    path = path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return f"https://{host}/{path}", host


def infer_url_pattern(host: str) -> str:
    if host == "github.com":
        return GITHUB_STYLE
    if host == "gitlab.com" or host.endswith(".gitlab.com") or "gitlab." in host:
        return GITLAB_STYLE
    if host == "codeberg.org" or "gitea" in host:
        return GITEA_STYLE
    if host == "bitbucket.org":
        return BITBUCKET_STYLE
    return GITHUB_STYLE


def build_url(
    info: GitInfo,
    rel_path: Path,
    pattern: str | None = None,
    branch: str | None = None,
) -> str:
    """Return the web URL of ``rel_path`` inside ``info``'s repository.

    Args:
        info: Repository information.
        rel_path: Path relative to the repository root.
        pattern: URL pattern with ``{base}``, ``{branch}`` and ``{file}``
            placeholders; inferred from the host when omitted.
        branch: Branch name; defaults to the repository's default branch.
    """

    file_path = rel_path.as_posix().replace("\\", "/")
    pattern = pattern or infer_url_pattern(info.remote_host)
    return (
        pattern.replace("{base}", info.remote_url)
        .replace("{branch}", branch or info.default_branch)
        .replace("{file}", file_path)
    )


def extract_base_url(full_url: str) -> str | None:
    """Return the repository part of a file URL built by :func:`build_url`."""
    for separator in _BASE_SEPARATORS:
        pos = full_url.find(separator)
        if pos >= 0:
            return full_url[:pos]
    return None


def _git(cwd: Path, *args: str) -> str | None:
    try:
        proc = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True)
    except OSError as exc:
        logger.debug("failed to run git in `%s`: %s", cwd, exc)
        return None
    if proc.returncode != 0:
        logger.debug("`git %s` failed in `%s`: %s", " ".join(args), cwd, proc.stderr.strip())
        return None
    return proc.stdout.strip()


def _existing_dir(path: Path) -> Path | None:
    for candidate in (path, *path.parents):
        if candidate.is_dir():
            return candidate
    return None


class GitCache:
    """Per-run memo of :class:`GitInfo` keyed by repository root."""

    def __init__(self) -> None:
        self._by_root: dict[Path, GitInfo | None] = {}

    def __len__(self) -> int:
        return len(self._by_root)

    def _remote_url(self, root: Path) -> str | None:
        url = _git(root, "remote", "get-url", "origin")
        if url:
            return url
        remotes = _git(root, "remote")
        if not remotes:
            return None
        return _git(root, "remote", "get-url", remotes.splitlines()[0])

    def _default_branch(self, root: Path) -> str:
        target = _git(root, "symbolic-ref", "refs/remotes/origin/HEAD")
        prefix = "refs/remotes/origin/"
        if target and target.startswith(prefix):
            return target[len(prefix) :]
        return DEFAULT_BRANCH

    def _detect(self, root: Path) -> GitInfo | None:
        raw = self._remote_url(root)
        if raw is None:
            logger.warning("failed to extract info from repo at `%s`", root)
            return None
        try:
            remote_url, host = normalize_remote(raw)
        except UpstreamError as exc:
            logger.warning("failed to normalize git url `%s`: %s", raw, exc)
            return None
        return GitInfo(
            root=root,
            remote_url=remote_url,
            remote_host=host,
            default_branch=self._default_branch(root),
        )

    def get_or_detect(self, path: Path) -> GitInfo | None:
        """Return repository info for ``path``, or None outside a usable repo."""
        start = _existing_dir(path if path.is_dir() else path.parent)
        if start is None:
            logger.info("failed to discover git repo from path `%s`", path)
            return None
        top = _git(start, "rev-parse", "--show-toplevel")
        if not top:
            logger.info("failed to discover git repo from path `%s`", path)
            return None
        root = Path(top).resolve()
        if root not in self._by_root:
            self._by_root[root] = self._detect(root)
        return self._by_root[root]
