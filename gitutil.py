# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import dataclasses
import logging

import git

logger = logging.getLogger(__name__)


@dataclasses.dataclass(kw_only=True)
class GitCfg:
    '''
    Configuration for interacting w/ a git-repository.

    repo_url: if set, used as clone-source by `GitHelper.clone_into`. Any url (or local path)
              understood by `git clone` is accepted.
    '''
    repo_url: str | None = None


class GitHelper:
    '''
    thin wrapper around a local git-repository. All queries are run through the git executable
    (via GitPython), raising `git.exc.GitCommandError` upon non-zero exit codes.
    '''
    def __init__(
        self,
        repo,
        git_cfg: GitCfg | None=None,
    ):
        if repo is None:
            raise ValueError(repo)
        if isinstance(repo, str):
            repo = git.Repo(repo)
        if not isinstance(repo, git.Repo):
            raise ValueError(repo)

        self.repo = repo
        self.git_cfg = git_cfg or GitCfg()

    @property
    def repo_path(self) -> str:
        return self.repo.working_tree_dir

    @staticmethod
    def clone_into(
        target_directory: str,
        git_cfg: GitCfg,
        checkout_branch: str = None,
    ) -> 'GitHelper':
        if not git_cfg.repo_url:
            raise ValueError('repo-url must not be None')

        args = ['--quiet']
        if checkout_branch is not None:
            args += ['--branch', checkout_branch, '--single-branch']
        args += [git_cfg.repo_url, target_directory]

        logger.debug(f'cloning {git_cfg.repo_url=} into {target_directory=}')
        git.Git().clone(*args)

        return GitHelper(
            repo=git.Repo(target_directory),
            git_cfg=git_cfg,
        )

    def tags(self) -> list[str]:
        '''
        returns tag names in the order reported by `git tag`
        '''
        return [tag for tag in self.repo.git.tag().splitlines() if tag.strip()]

    def commit_for_ref(self, ref: str) -> str:
        '''
        returns the hexsha of the commit the given ref (typically a tag) points to
        '''
        return self.repo.git.rev_list('-n', '1', ref).strip()

    def root_commits(self, ref: str='HEAD') -> tuple[str, ...]:
        '''
        returns the hexshas of all parentless commits reachable from `ref`
        '''
        return tuple(self.repo.git.rev_list('--max-parents=0', ref).split())

    def show_file(self, commit: str, path: str) -> str:
        '''
        returns the contents of the file at `path` as of the given commit
        '''
        return self.repo.git.show(f'{commit}:{path}')

    def log(self, revision_range: str, pretty_format: str) -> str:
        return self.repo.git.log(f'--pretty=format:{pretty_format}', revision_range)

    def commit_digests(self, revision_range: str) -> list[str]:
        '''
        returns commit digests in the given range, newest first (as `git log` does)
        '''
        return self.log(
            revision_range=revision_range,
            pretty_format='%H',
        ).split()
