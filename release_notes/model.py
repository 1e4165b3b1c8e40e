import dataclasses


class ReleaseNotesError(RuntimeError):
    pass


class UnknownVersion(ReleaseNotesError, ValueError):
    def __init__(self, kind: str, version: str):
        self.kind = kind
        self.version = version
        super().__init__(f'Unknown {kind} version: {version}')


class ScratchDirError(ReleaseNotesError):
    pass


class CloneError(ReleaseNotesError):
    pass


@dataclasses.dataclass
class Repo:
    '''
    a repository contributing to the release-notes. Populated progressively while resolving
    versions (start_commit is only set if start_version is absent, or after resolving its tag).
    '''
    name: str
    identifier: str
    start_version: str | None = None
    end_version: str | None = None
    start_commit: str | None = None


@dataclasses.dataclass(frozen=True)
class Commit:
    subject: str
    body: str
    author_email: str
    sha: str


@dataclasses.dataclass(frozen=True)
class RepoCommits:
    repo: Repo
    start_version: str | None
    end_version: str
    start_commit: str | None
    commits: tuple[Commit, ...]


@dataclasses.dataclass(frozen=True)
class VersionRange:
    start_version: str
    end_version: str

    @property
    def revision_range(self) -> str:
        return f'{self.start_version}..{self.end_version}'


@dataclasses.dataclass(frozen=True)
class UnionManifest:
    '''
    the union package's manifest (`package.json`), as of a given commit
    '''
    commit: str
    raw: dict

    def dependency_version(self, package_name: str) -> str | None:
        return (self.raw.get('dependencies') or {}).get(package_name)
