"""
Remote Git sources.

Parsing of repository URLs/slugs plus a fetcher that materialises a local
copy with the ``git`` binary. The walker never sees any of this: it only
receives the local path yielded by :meth:`GitFetcher.fetch`.
"""

from __future__ import annotations

import re
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, ContextManager, Iterator, List, Optional, Protocol, Sequence
from urllib.parse import urlparse

from . import console
from .core import FetchError, SourceParseError

KNOWN_GIT_HOSTS = (
    "github.com",
    "gitlab.com",
    "bitbucket.org",
    "gitea.com",
    "codeberg.org",
)

_SSH_URL = re.compile(
    r"^(?:ssh://)?git@([\w.-]+):([\w.-]+)/([\w.-]+?)(?:\.git)?(?:/(tree|blob)/([\w.-]+)/?(.*))?$"
)
_HTTP_URL = re.compile(
    r"^https?://([\w.-]+)/([\w.-]+)/([\w.-]+?)(?:\.git)?(?:/(tree|blob)/([\w.-]+)/?(.*))?$"
)
_SLUG = re.compile(r"^([\w.-]+)/([\w.-]+)$")
_COMMIT = re.compile(r"^[0-9a-fA-F]{7,40}$")


@dataclass(frozen=True)
class GitURLParts:
    repo_url: str
    host: str
    user: str
    repo_name: str
    branch: str = ""
    commit: str = ""
    sub_path: str = "/"
    kind: str = ""  # "tree", "blob" or "" for the repository root
    is_ssh: bool = False

    @property
    def has_sub_path(self) -> bool:
        return self.sub_path not in ("", "/")

    @property
    def is_blob(self) -> bool:
        return self.kind == "blob"

    def display_name(self) -> str:
        """``user/repo`` plus the tree sub-path, used as the digest's root name."""
        name = f"{self.user}/{self.repo_name}"
        if self.has_sub_path and not self.is_blob:
            name += self.sub_path.rstrip("/")
        return name


def is_likely_git_url(source: str) -> bool:
    if source.startswith(("git@", "ssh://")):
        return True
    if source.startswith(("http://", "https://")):
        return bool(urlparse(source).netloc)
    return bool(_SLUG.match(source))


def _from_match(m: "re.Match[str]", repo_url: str, is_ssh: bool) -> GitURLParts:
    host, user, repo = m.group(1), m.group(2), m.group(3)
    ref = m.group(5) or ""
    rest = m.group(6) or ""
    return GitURLParts(
        repo_url=repo_url.format(host=host, user=user, repo=repo),
        host=host,
        user=user,
        repo_name=repo,
        branch="" if _COMMIT.match(ref) else ref,
        commit=ref if _COMMIT.match(ref) else "",
        sub_path="/" + rest.strip("/") if rest else "/",
        kind=m.group(4) or "",
        is_ssh=is_ssh,
    )


def parse_git_url(source: str) -> GitURLParts:
    """Split an SSH/HTTPS URL or a ``user/repo`` slug into its parts."""
    m = _SSH_URL.match(source)
    if m:
        return _from_match(m, "git@{host}:{user}/{repo}.git", True)

    url = source
    if not url.startswith(("http://", "https://")) and "/" in url:
        first = url.split("/", 1)[0]
        if first.lower() in KNOWN_GIT_HOSTS or "." in first:
            url = "https://" + url

    m = _HTTP_URL.match(url)
    if m:
        return _from_match(m, "https://{host}/{user}/{repo}.git", False)

    m = _SLUG.match(source)
    if m:
        user, repo = m.group(1), m.group(2)
        return GitURLParts(
            repo_url=f"https://github.com/{user}/{repo}.git",
            host="github.com",
            user=user,
            repo_name=repo,
        )

    raise SourceParseError(f"could not parse '{source}' as a known Git URL format or slug")


class RemoteFetcher(Protocol):
    def fetch(self, parts: GitURLParts) -> ContextManager[Path]: ...


Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class GitFetcher:
    """Fetch repositories by shelling out to ``git``.

    *runner* has the signature of :func:`subprocess.run`; tests swap it out.
    """

    def __init__(
        self,
        git: str = "git",
        runner: Optional[Runner] = None,
        verbose: bool = False,
    ) -> None:
        self.git = git
        self.runner = runner or subprocess.run
        self.verbose = verbose

    def _run(self, args: Sequence[str], what: str) -> str:
        cmd = [self.git, *args]
        try:
            proc = self.runner(cmd, capture_output=True, text=True)
        except OSError as e:
            raise FetchError(f"{what} failed: could not run {self.git}: {e}")
        if proc.returncode != 0:
            output = (proc.stderr or "") + (proc.stdout or "")
            raise FetchError(f"{what} failed (exit {proc.returncode})\nOutput: {output.strip()}")
        return proc.stdout or ""

    def check_repo_exists(self, repo_url: str) -> None:
        try:
            self._run(["ls-remote", repo_url], f"git ls-remote {repo_url}")
        except FetchError as e:
            raise FetchError(f"repository {repo_url} does not exist or is not accessible: {e}")

    def list_branches(self, repo_url: str) -> List[str]:
        out = self._run(["ls-remote", "--heads", repo_url], f"git ls-remote --heads {repo_url}")
        branches = []
        for line in out.splitlines():
            if "refs/heads/" in line:
                branches.append(line.split("refs/heads/", 1)[1].strip())
        return branches

    def clone(self, parts: GitURLParts, dest_dir: Path) -> Path:
        """Clone into ``dest_dir/<repo>`` and return that path."""
        target = dest_dir / parts.repo_name
        args = ["clone"]
        if parts.has_sub_path:
            args += ["--filter=blob:none", "--sparse"]
        if not parts.commit:
            args += ["--depth=1", "--single-branch"]
            if parts.branch:
                args += ["--branch", parts.branch]
        args += [parts.repo_url, str(target)]
        self._run(args, f"git clone {parts.repo_url}")

        if parts.commit:
            self._run(
                ["-C", str(target), "checkout", parts.commit],
                f"git checkout {parts.commit}",
            )

        if parts.has_sub_path:
            sparse = parts.sub_path.lstrip("/")
            if parts.is_blob:
                sparse = sparse.rpartition("/")[0]
            if sparse:
                self._run(
                    ["-C", str(target), "sparse-checkout", "set", sparse],
                    f"git sparse-checkout set {sparse}",
                )
        return target

    @contextmanager
    def fetch(self, parts: GitURLParts) -> Iterator[Path]:
        """Yield a local path for *parts*; the scratch clone is removed on exit."""
        console.info(f"Checking if repository {parts.repo_url} exists …", self.verbose)
        self.check_repo_exists(parts.repo_url)

        try:
            scratch = Path(tempfile.mkdtemp(prefix="pathdigest-clone-"))
        except OSError as e:
            raise FetchError(f"failed to create temporary clone directory: {e}")

        try:
            console.info(
                f"Cloning {parts.repo_url} (branch: {parts.branch or '-'}, "
                f"commit: {parts.commit or '-'}, path: {parts.sub_path}) into {scratch} …",
                self.verbose,
            )
            cloned = self.clone(parts, scratch)
            if parts.has_sub_path:
                yield cloned / parts.sub_path.lstrip("/")
            else:
                yield cloned
        finally:
            console.info(f"Cleaning up temporary directory: {scratch}", self.verbose)
            shutil.rmtree(scratch, ignore_errors=True)
