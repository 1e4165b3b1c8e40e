import os

import git
import pytest

import gitutil
import release_notes.cfg as rnc
import release_notes.model as rnm
import release_notes.sync as rns


@pytest.fixture
def cfg(tmp_path):
    return rnc.ReleaseNotesCfg(
        dependencies=(
            rnc.RepoCfg(name='Core', identifier='tfjs-core'),
            rnc.RepoCfg(name='Layers', identifier='tfjs-layers'),
        ),
        auxiliary=rnc.RepoCfg(name='Node', identifier='tfjs-node'),
        repo_url_template=str(tmp_path / 'remotes' / '{identifier}'),
        scratch_dir=str(tmp_path / 'scratch'),
    )


@pytest.fixture
def union(repo_builder):
    builder = repo_builder('tfjs')
    builder.manifest_commit(
        'Release 1.0.0',
        dependencies={'@tensorflow/tfjs-core': '1.0.0'},
        tags=('v1.0.0',),
    )
    builder.commit('Update README', files={'README.md': 'tfjs'})
    builder.manifest_commit(
        'Release 1.1.0',
        dependencies={'@tensorflow/tfjs-core': '1.1.0', '@tensorflow/tfjs-layers': '1.1.0'},
        tags=('v1.1.0',),
    )
    return builder


@pytest.fixture
def core(repo_builder):
    builder = repo_builder('tfjs-core')
    builder.commit('initial commit', tags=('v1.0.0',))
    builder.commit('Add conv3d')
    builder.commit('Release 1.1.0', tags=('v1.1.0',))
    return builder


@pytest.fixture
def layers(repo_builder):
    builder = repo_builder('tfjs-layers')
    builder.commit('initial commit')
    builder.commit('Add dense layer')
    builder.commit('Release 1.1.0', tags=('v1.1.0',))
    return builder


def test_prepare_scratch_dir_creates_dir(tmp_path):
    scratch_dir = str(tmp_path / 'a' / 'scratch')

    assert rns.prepare_scratch_dir(scratch_dir) == scratch_dir
    assert os.path.isdir(scratch_dir)


def test_prepare_scratch_dir_removes_contents(tmp_path):
    scratch_dir = tmp_path / 'scratch'
    (scratch_dir / 'Core' / 'src').mkdir(parents=True)
    (scratch_dir / 'Core' / 'src' / 'index.ts').write_text('export {}')
    (scratch_dir / 'stale.md').write_text('stale')

    rns.prepare_scratch_dir(str(scratch_dir))

    assert os.path.isdir(scratch_dir)
    assert os.listdir(scratch_dir) == []


def test_prepare_scratch_dir_fails_for_file(tmp_path):
    not_a_dir = tmp_path / 'file'
    not_a_dir.write_text('')

    with pytest.raises(rnm.ScratchDirError):
        rns.prepare_scratch_dir(str(not_a_dir))


def test_clone_repo(cfg, core):
    scratch_dir = rns.prepare_scratch_dir(cfg.scratch_dir)

    git_helper = rns.clone_repo(
        repo=rnm.Repo(name='Core', identifier='tfjs-core'),
        scratch_dir=scratch_dir,
        cfg=cfg,
    )

    assert git_helper.repo_path == os.path.join(scratch_dir, 'Core')
    assert git_helper.tags() == ['v1.0.0', 'v1.1.0']


def test_clone_repo_fails_for_absent_remote(cfg):
    scratch_dir = rns.prepare_scratch_dir(cfg.scratch_dir)

    with pytest.raises(rnm.CloneError):
        rns.clone_repo(
            repo=rnm.Repo(name='Data', identifier='tfjs-data'),
            scratch_dir=scratch_dir,
            cfg=cfg,
        )


def test_union_commit_bounds(union):
    git_helper = gitutil.GitHelper(repo=union.path)

    earliest, latest = rns.union_commit_bounds(
        git_helper=git_helper,
        version_range=rnm.VersionRange(start_version='v1.0.0', end_version='v1.1.0'),
    )

    assert latest == union.repo.tags['v1.1.0'].commit.hexsha
    assert earliest == union.repo.tags['v1.1.0'].commit.parents[0].hexsha


def test_union_commit_bounds_for_empty_range(union):
    with pytest.raises(rnm.ReleaseNotesError):
        rns.union_commit_bounds(
            git_helper=gitutil.GitHelper(repo=union.path),
            version_range=rnm.VersionRange(start_version='v1.1.0', end_version='v1.1.0'),
        )


def test_read_union_manifest(union):
    git_helper = gitutil.GitHelper(repo=union.path)

    manifest = rns.read_union_manifest(
        git_helper=git_helper,
        commit='v1.0.0',
        manifest_path='package.json',
    )

    assert manifest.dependency_version('@tensorflow/tfjs-core') == '1.0.0'
    assert manifest.dependency_version('@tensorflow/tfjs-layers') is None


def test_read_invalid_union_manifest(repo_builder):
    builder = repo_builder('broken')
    builder.commit('broken manifest', files={'package.json': '{'}, tags=('v1.0.0',))

    with pytest.raises(rnm.ReleaseNotesError):
        rns.read_union_manifest(
            git_helper=gitutil.GitHelper(repo=builder.path),
            commit='v1.0.0',
            manifest_path='package.json',
        )


def test_resolve_dependency_range(cfg, core):
    repo = rnm.Repo(name='Core', identifier='tfjs-core')

    rns.resolve_dependency_range(
        repo=repo,
        git_helper=gitutil.GitHelper(repo=core.path),
        start_dependency_version='1.0.0',
        end_dependency_version='^1.1.0',
        cfg=cfg,
    )

    assert repo.start_version == 'v1.0.0'
    assert repo.end_version == 'v1.1.0'
    assert repo.start_commit == core.repo.tags['v1.0.0'].commit.hexsha


def test_resolve_dependency_range_for_untagged_dependency(cfg, layers):
    repo = rnm.Repo(name='Layers', identifier='tfjs-layers')

    rns.resolve_dependency_range(
        repo=repo,
        git_helper=gitutil.GitHelper(repo=layers.path),
        start_dependency_version=None,
        end_dependency_version='1.1.0',
        cfg=cfg,
    )

    root_commit = layers.repo.tags['v1.1.0'].commit.parents[0].parents[0]
    assert not root_commit.parents

    assert repo.start_version is None
    assert repo.start_commit == root_commit.hexsha
    assert repo.end_version == 'v1.1.0'


def test_resolve_dependency_range_requires_end_version(cfg, core):
    with pytest.raises(rnm.ReleaseNotesError):
        rns.resolve_dependency_range(
            repo=rnm.Repo(name='Core', identifier='tfjs-core'),
            git_helper=gitutil.GitHelper(repo=core.path),
            start_dependency_version='1.0.0',
            end_dependency_version=None,
            cfg=cfg,
        )


def test_sync_union_dependencies(cfg, union, core, layers):
    scratch_dir = rns.prepare_scratch_dir(cfg.scratch_dir)

    synced = rns.sync_union_dependencies(
        union_git_helper=gitutil.GitHelper(repo=union.path),
        version_range=rnm.VersionRange(start_version='v1.0.0', end_version='v1.1.0'),
        scratch_dir=scratch_dir,
        cfg=cfg,
    )

    repos = [repo for repo, _ in synced]
    assert [repo.name for repo in repos] == ['Core', 'Layers']

    core_repo, layers_repo = repos
    assert (core_repo.start_version, core_repo.end_version) == ('v1.0.0', 'v1.1.0')
    # tfjs-layers was not a dependency of the union at start
    assert (layers_repo.start_version, layers_repo.end_version) == (None, 'v1.1.0')
    assert layers_repo.start_commit is not None

    for repo, git_helper in synced:
        assert git_helper.repo_path == os.path.join(scratch_dir, repo.name)


def test_sync_auxiliary_repo(cfg, repo_builder):
    node = repo_builder('tfjs-node')
    node.commit('initial commit', tags=('v0.1.0',))
    node.commit('Add native bindings', tags=('v0.2.0',))

    scratch_dir = rns.prepare_scratch_dir(cfg.scratch_dir)
    replies = iter(('v0.1.0', ''))

    repo, git_helper = rns.sync_auxiliary_repo(
        scratch_dir=scratch_dir,
        cfg=cfg,
        prompt=lambda question: next(replies),
    )

    assert repo.name == 'Node'
    assert repo.start_version == 'v0.1.0'
    assert repo.end_version == 'v0.2.0'
    assert repo.start_commit == node.repo.tags['v0.1.0'].commit.hexsha
    assert git_helper.repo_path == os.path.join(scratch_dir, 'Node')


def test_sync_auxiliary_repo_is_optional(cfg):
    cfg.auxiliary = None

    assert rns.sync_auxiliary_repo(scratch_dir=cfg.scratch_dir, cfg=cfg) is None


def test_unique_root_commit(core):
    git_helper = gitutil.GitHelper(repo=core.path)

    assert rns.unique_root_commit(git_helper) == \
        core.repo.tags['v1.0.0'].commit.hexsha


def test_unique_root_commit_fails_for_unrelated_histories(repo_builder):
    builder = repo_builder('tfjs-layers')
    first_root = builder.commit('initial commit', files={'a.ts': 'a'})

    actor = git.Actor('Jane Doe', 'jane@example.com')
    second_root = git.Commit.create_from_tree(
        repo=builder.repo,
        tree=builder.repo.index.write_tree(),
        message='imported history',
        parent_commits=[],
        author=actor,
        committer=actor,
    )
    builder.repo.index.commit(
        'merge imported history',
        parent_commits=[first_root, second_root],
        author=actor,
        committer=actor,
    )

    git_helper = gitutil.GitHelper(repo=builder.path)
    assert len(git_helper.root_commits()) == 2

    with pytest.raises(rnm.ReleaseNotesError):
        rns.unique_root_commit(git_helper)
