'''
configuration for release-notes drafting.

Defaults describe the TensorFlow.js union (`tfjs`) and its dependency repositories. Any value may be
overwritten from a YAML document, e.g.:

    github_org: tensorflow
    union_package_name: tfjs
    dependencies:
      - name: Core
        identifier: tfjs-core
    auxiliary:
      name: Node
      identifier: tfjs-node
'''

import dataclasses
import os

import dacite
import yaml

import github
import release_notes.model as rnm


@dataclasses.dataclass(frozen=True)
class RepoCfg:
    name: str
    identifier: str

    def as_repo(self) -> rnm.Repo:
        return rnm.Repo(
            name=self.name,
            identifier=self.identifier,
        )


@dataclasses.dataclass(frozen=True)
class BucketCfg:
    display: str
    identifiers: tuple[str, ...]
    priority: int


def _default_dependencies() -> tuple[RepoCfg, ...]:
    return (
        RepoCfg(name='Core', identifier='tfjs-core'),
        RepoCfg(name='Data', identifier='tfjs-data'),
        RepoCfg(name='Layers', identifier='tfjs-layers'),
        RepoCfg(name='Converter', identifier='tfjs-converter'),
    )


@dataclasses.dataclass
class ReleaseNotesCfg:
    github_url: str = 'https://github.com'
    github_org: str = 'tensorflow'
    union_package_name: str = 'tfjs'
    # prefix of dependency-names in union's manifest (e.g. `@tensorflow/tfjs-core`)
    package_scope: str = '@tensorflow/'
    manifest_path: str = 'package.json'
    tag_prefix: str = 'v'
    dependencies: tuple[RepoCfg, ...] = dataclasses.field(default_factory=_default_dependencies)
    auxiliary: RepoCfg | None = RepoCfg(name='Node', identifier='tfjs-node')
    scratch_dir: str = '/tmp/tfjs-release-notes'
    out_file: str = 'release-notes.md'
    # clone-source; may be overwritten (e.g. to point to local mirrors)
    repo_url_template: str = '{github_url}/{github_org}/{identifier}'
    # tag-bucket taxonomy; if None, the default policy is used
    buckets: tuple[BucketCfg, ...] | None = None
    ignored_tags: tuple[str, ...] = ('INTERNAL',)
    fallback_bucket: str = 'Misc'

    def package_name(self, repo: rnm.Repo) -> str:
        return f'{self.package_scope}{repo.identifier}'

    def tag_for_version(self, version: str) -> str:
        return f'{self.tag_prefix}{version}'

    def clone_url(self, repo: rnm.Repo) -> str:
        return self.repo_url_template.format(
            github_url=self.github_url.rstrip('/'),
            github_org=self.github_org,
            identifier=repo.identifier,
            name=repo.name,
        )

    def web_url(self, repo: rnm.Repo) -> str:
        return github.repo_url(
            github_url=self.github_url,
            org=self.github_org,
            repo=repo.identifier,
        )


def cfg_from_dict(raw: dict | None) -> ReleaseNotesCfg:
    return dacite.from_dict(
        data_class=ReleaseNotesCfg,
        data=raw or {},
        config=dacite.Config(cast=[tuple]),
    )


def load_cfg(path: str | None=None) -> ReleaseNotesCfg:
    '''
    loads configuration from the given YAML file. If no path is given, defaults are returned.

    raises `dacite.DaciteError` for malformed configuration
    '''
    if not path:
        return ReleaseNotesCfg()

    if not os.path.isfile(path):
        raise ValueError(f'not an existing file: {path}')

    with open(path) as f:
        return cfg_from_dict(yaml.safe_load(f))
