"""
Git working tree operations (clone, checkout, pull, commit, push).
"""

from pathlib import Path
from typing import Optional, Union

from git import Actor, GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from k8soci.exceptions import GitError
from k8soci.git.auth import GitAuthChain
from k8soci.git.credentials import build_secure_url, strip_credentials
from k8soci.logging import get_logger

logger = get_logger("k8soci.git.repository")

PathLike = Union[str, Path]


class GitAccount:
    """Commits and pushes as one author, authenticating through a GitAuthChain"""

    def __init__(self, name: str, email: str, auth_chain: GitAuthChain):
        self.name = name
        self.email = email
        self.auth_chain = auth_chain

    @property
    def actor(self) -> Actor:
        return Actor(self.name, self.email)

    def _secure_url(self, repo_url: str) -> str:
        return build_secure_url(strip_credentials(repo_url), self.auth_chain.resolve())

    @staticmethod
    def _already_cloned(path: PathLike) -> Optional[Repo]:
        try:
            return Repo(str(path))
        except (InvalidGitRepositoryError, NoSuchPathError):
            return None

    @staticmethod
    def _open_existing_repo(path: PathLike) -> Optional[Repo]:
        try:
            return Repo(str(path))
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            logger.error(f"Open failed for {path}: {e}")
            return None

    def prepare_repository(self, repo_url: str, path: PathLike, branch: str) -> Repo:
        """
        Clone the repository or reuse an existing clone, then check out the branch.

        An existing clone is pulled after checkout; being already up to date
        is not an error.

        Raises:
            AuthExchangeError: If credentials cannot be resolved
            GitError: If clone, checkout or pull fails
        """
        repo = self._already_cloned(path)
        cloned = repo is None

        try:
            if cloned:
                logger.info(f"Cloning {strip_credentials(repo_url)} into {path}")
                repo = Repo.clone_from(self._secure_url(repo_url), str(path))

            repo.git.checkout(branch, force=True)

            if not cloned:
                origin = repo.remote("origin")
                origin.set_url(self._secure_url(repo_url))
                origin.pull(branch)
        except GitCommandError as e:
            logger.error(f"Preparing repository {strip_credentials(repo_url)} failed: {e}")
            raise GitError(f"Failed to prepare repository: {e}")

        logger.debug("Git repository is prepared")
        return repo

    def commit_all(self, path: PathLike, message: str) -> bool:
        """
        Stage every change in the work tree, commit and push.

        Returns:
            bool: True if a commit was pushed, False if there was nothing to do
        """
        repo = self._open_existing_repo(path)
        if repo is None:
            return False

        if not repo.is_dirty(untracked_files=True):
            logger.debug("Git work tree is clean, skip commit")
            return False

        try:
            repo.git.add(A=True)
        except GitCommandError as e:
            logger.error(f"Add failed: {e}")
            raise GitError(f"Failed to stage changes: {e}")

        return self._commit_and_push(repo, message)

    def commit_and_push(self, path: PathLike, message: str) -> bool:
        """
        Commit tracked changes and push.

        Returns:
            bool: True if a commit was pushed, False if there was nothing to do
        """
        repo = self._open_existing_repo(path)
        if repo is None:
            return False

        if not repo.is_dirty(untracked_files=True):
            logger.debug("Git work tree is clean, skip commit")
            return False

        try:
            repo.git.add(u=True)
        except GitCommandError as e:
            logger.error(f"Add failed: {e}")
            raise GitError(f"Failed to stage changes: {e}")

        return self._commit_and_push(repo, message)

    def remove(self, work_tree: PathLike, path: str) -> bool:
        """Remove a path from the index and the work tree"""
        repo = self._open_existing_repo(work_tree)
        if repo is None:
            return False

        try:
            repo.index.remove([path], working_tree=True, r=True)
        except GitCommandError as e:
            logger.error(f"Remove of {path} failed: {e}")
            raise GitError(f"Failed to remove {path}: {e}")
        return True

    def _commit_and_push(self, repo: Repo, message: str) -> bool:
        commit = repo.index.commit(message, author=self.actor, committer=self.actor)
        logger.info(f"Created commit {commit.hexsha}")

        origin = repo.remote("origin")
        branch = repo.active_branch.name
        origin.set_url(self._secure_url(origin.url))

        try:
            origin.push(refspec=f"{branch}:{branch}").raise_if_error()
        except GitCommandError as e:
            logger.error(f"Push failed: {e}")
            raise GitError(f"Failed to push: {e}")

        logger.info("Push was successful")
        return True
