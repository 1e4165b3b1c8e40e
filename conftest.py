import json
import os

import git
import pytest


class RepoBuilder:
    '''
    creates throw-away git repositories w/ a given history
    '''
    def __init__(self, path):
        os.makedirs(path, exist_ok=True)
        self.path = str(path)
        self.repo = git.Repo.init(self.path)

    def commit(
        self,
        message: str,
        files: dict[str, str]=None,
        tags=(),
        author_email: str='jane@example.com',
    ) -> git.Commit:
        for relpath, contents in (files or {}).items():
            with open(os.path.join(self.path, relpath), 'w') as f:
                f.write(contents)
            self.repo.index.add([relpath])

        actor = git.Actor('Jane Doe', author_email)
        commit = self.repo.index.commit(
            message,
            author=actor,
            committer=actor,
        )
        for tag in tags:
            self.repo.create_tag(tag, ref=commit)

        return commit

    def manifest_commit(
        self,
        message: str,
        dependencies: dict[str, str],
        tags=(),
    ) -> git.Commit:
        return self.commit(
            message=message,
            files={'package.json': json.dumps({'name': 'union', 'dependencies': dependencies})},
            tags=tags,
        )


@pytest.fixture
def repo_builder(tmp_path):
    def repo_builder(name: str) -> RepoBuilder:
        return RepoBuilder(tmp_path / 'remotes' / name)

    return repo_builder
