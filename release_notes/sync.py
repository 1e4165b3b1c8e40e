import json
import logging
import os
import shutil

import git.exc

import gitutil
import release_notes.cfg as rnc
import release_notes.model as rnm
import release_notes.resolve as rnr
import version

logger = logging.getLogger(__name__)


def prepare_scratch_dir(path: str) -> str:
    '''
    ensures the given directory exists and is empty (removes all of its contents)
    '''
    try:
        os.makedirs(path, exist_ok=True)
        for entry in os.scandir(path):
            if entry.is_dir(follow_symlinks=False):
                shutil.rmtree(entry.path)
            else:
                os.unlink(entry.path)
    except OSError as e:
        raise rnm.ScratchDirError(f'Error creating temp dir {path}: {e}') from e

    return path


def clone_repo(
    repo: rnm.Repo,
    scratch_dir: str,
    cfg: rnc.ReleaseNotesCfg,
) -> gitutil.GitHelper:
    target_dir = os.path.join(scratch_dir, repo.name)
    logger.info(f'Cloning {repo.identifier}...')

    try:
        os.mkdir(target_dir)
        return gitutil.GitHelper.clone_into(
            target_directory=target_dir,
            git_cfg=gitutil.GitCfg(repo_url=cfg.clone_url(repo)),
        )
    except (OSError, git.exc.GitCommandError) as e:
        raise rnm.CloneError(f'failed to clone {repo.identifier} into {target_dir}: {e}') from e


def union_commit_bounds(
    git_helper: gitutil.GitHelper,
    version_range: rnm.VersionRange,
) -> tuple[str, str]:
    '''
    returns the earliest and the latest union-commit within the given range
    '''
    commits = git_helper.commit_digests(version_range.revision_range)
    if not commits:
        raise rnm.ReleaseNotesError(
            f'no union commits found in range {version_range.revision_range}'
        )

    # git log lists newest commits first
    return commits[-1], commits[0]


def read_union_manifest(
    git_helper: gitutil.GitHelper,
    commit: str,
    manifest_path: str,
) -> rnm.UnionManifest:
    raw = git_helper.show_file(commit=commit, path=manifest_path)
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise rnm.ReleaseNotesError(f'{manifest_path} at {commit} is not valid JSON: {e}') from e

    return rnm.UnionManifest(commit=commit, raw=parsed)


def unique_root_commit(git_helper: gitutil.GitHelper) -> str:
    root_commits = git_helper.root_commits()
    if len(root_commits) != 1:
        raise rnm.ReleaseNotesError(
            f'expected exactly one root commit in {git_helper.repo_path}, found {root_commits}'
        )
    return root_commits[0]


def resolve_dependency_range(
    repo: rnm.Repo,
    git_helper: gitutil.GitHelper,
    start_dependency_version: str | None,
    end_dependency_version: str | None,
    cfg: rnc.ReleaseNotesCfg,
) -> rnm.Repo:
    '''
    maps the dependency versions recorded in the union's manifest to tags of the dependency's
    repository, and resolves the start commit. If the dependency was absent from the manifest at
    start (i.e. it was not tagged yet), the repository's root commit is used instead.
    '''
    if not end_dependency_version:
        raise rnm.ReleaseNotesError(
            f'{cfg.package_name(repo)} is not a dependency of {cfg.union_package_name} '
            'at the end version'
        )

    repo.end_version = cfg.tag_for_version(version.pinned_version(end_dependency_version))

    if start_dependency_version is not None:
        repo.start_version = cfg.tag_for_version(version.pinned_version(start_dependency_version))
        repo.start_commit = git_helper.commit_for_ref(repo.start_version)
    else:
        logger.info(f'{repo.identifier} was not tagged at start - using its first commit')
        repo.start_version = None
        repo.start_commit = unique_root_commit(git_helper)

    return repo


def sync_union_dependencies(
    union_git_helper: gitutil.GitHelper,
    version_range: rnm.VersionRange,
    scratch_dir: str,
    cfg: rnc.ReleaseNotesCfg,
) -> list[tuple[rnm.Repo, gitutil.GitHelper]]:
    '''
    clones all union dependencies and resolves their version ranges from the union's manifest at
    the earliest and latest union commit of the given range
    '''
    earliest_commit, latest_commit = union_commit_bounds(
        git_helper=union_git_helper,
        version_range=version_range,
    )
    earliest_manifest = read_union_manifest(
        git_helper=union_git_helper,
        commit=earliest_commit,
        manifest_path=cfg.manifest_path,
    )
    latest_manifest = read_union_manifest(
        git_helper=union_git_helper,
        commit=latest_commit,
        manifest_path=cfg.manifest_path,
    )

    synced = []
    for repo_cfg in cfg.dependencies:
        repo = repo_cfg.as_repo()
        package_name = cfg.package_name(repo)

        git_helper = clone_repo(repo=repo, scratch_dir=scratch_dir, cfg=cfg)
        resolve_dependency_range(
            repo=repo,
            git_helper=git_helper,
            start_dependency_version=earliest_manifest.dependency_version(package_name),
            end_dependency_version=latest_manifest.dependency_version(package_name),
            cfg=cfg,
        )
        synced.append((repo, git_helper))

    return synced


def sync_auxiliary_repo(
    scratch_dir: str,
    cfg: rnc.ReleaseNotesCfg,
    prompt: rnr.Prompt | None=None,
) -> tuple[rnm.Repo, gitutil.GitHelper] | None:
    '''
    clones the auxiliary repository (not pinned by the union's manifest) and asks the user for its
    version range
    '''
    if not cfg.auxiliary:
        return None

    repo = cfg.auxiliary.as_repo()
    git_helper = clone_repo(repo=repo, scratch_dir=scratch_dir, cfg=cfg)

    version_range = rnr.ask_user_for_versions(
        valid_versions=git_helper.tags(),
        package_name=repo.identifier,
        prompt=prompt,
    )
    repo.start_version = version_range.start_version
    repo.end_version = version_range.end_version
    repo.start_commit = git_helper.commit_for_ref(repo.start_version)

    return repo, git_helper
