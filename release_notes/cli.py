#!/usr/bin/env python3
'''
Generates a draft release notes markdown file for a release of the union package. Takes a start
version of the union package (and, optionally, an end version), finds the matching versions of all
dependency packages (as pinned in the union's manifest), and collects all commits between those
versions.

The release notes are grouped by repository, and then bucketed by a set of tags which committers
can use to organise commits into sections (see `release_notes.markdown`).

A GitHub token is used to look up usernames of commit authors (git logs only contain emails). If
not passed (or set as `GITHUB_TOKEN`), it is asked for interactively. Tokens can be generated at
https://github.com/settings/tokens

Usage (from within the union's worktree):

    # release notes for all commits after union version v0.9.0
    union-release-notes --start-version v0.9.0 --out ./draft_notes.md

    # release notes for all commits after v0.9.0 up to and including v0.10.3
    union-release-notes --start-version v0.9.0 --end-version v0.10.3 --out ./draft_notes.md
'''

import argparse
import getpass
import logging
import os
import sys

import dacite
import git.exc
import github3.exceptions

import ci.log
import ci.util
import github
import github.user
import gitutil
import release_notes.cfg as rnc
import release_notes.fetch as rnf
import release_notes.markdown as rnmd
import release_notes.model as rnm
import release_notes.resolve as rnr
import release_notes.sync as rns

logger = logging.getLogger(__name__)

TOKEN_PROMPT = 'Enter GitHub token (https://github.com/settings/tokens): '


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Draft release notes for the union package and its dependencies',
    )
    parser.add_argument(
        '--start-version',
        default=None,
        help='union start version (tag). asked for interactively if omitted',
    )
    parser.add_argument(
        '--end-version',
        default=None,
        help='union end version (tag). defaults to the newest version',
    )
    parser.add_argument(
        '--out',
        default=None,
        help='output file to write to (defaults to `out_file` from cfg: release-notes.md)',
    )
    parser.add_argument(
        '--repo-worktree',
        default=os.getcwd(),
        help='path to union package\'s worktree root',
    )
    parser.add_argument(
        '--scratch-dir',
        default=None,
        help='directory to clone repositories into (will be cleared!)',
    )
    parser.add_argument(
        '--cfg',
        default=None,
        help='path to YAML file overwriting default configuration (see release_notes.cfg)',
    )
    parser.add_argument(
        '--github-auth-token',
        default=os.environ.get('GITHUB_TOKEN', None),
        help='the github-auth-token to use (defaults to GITHUB_TOKEN, asked for if unset)',
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        default=False,
    )

    return parser.parse_args(argv)


def collect_repo_commits(
    union_git_helper: gitutil.GitHelper,
    cfg: rnc.ReleaseNotesCfg,
    scratch_dir: str,
    prompt: rnr.Prompt | None=None,
    start_version: str | None=None,
    end_version: str | None=None,
) -> list[rnm.RepoCommits]:
    '''
    asks for the union's version range, clones all dependency repositories (and the auxiliary
    repository) into `scratch_dir`, resolves their version ranges and returns their commits (in
    order of configured dependencies, followed by the auxiliary repository)
    '''
    rns.prepare_scratch_dir(scratch_dir)

    union_range = rnr.ask_user_for_versions(
        valid_versions=union_git_helper.tags(),
        package_name=cfg.union_package_name,
        prompt=prompt,
        start_version=start_version,
        end_version=end_version,
    )

    # clone the auxiliary repository eagerly so we can query its tags
    auxiliary = rns.sync_auxiliary_repo(
        scratch_dir=scratch_dir,
        cfg=cfg,
        prompt=prompt,
    )

    synced = rns.sync_union_dependencies(
        union_git_helper=union_git_helper,
        version_range=union_range,
        scratch_dir=scratch_dir,
        cfg=cfg,
    )
    if auxiliary:
        synced.append(auxiliary)

    return [
        rnf.fetch_repo_commits(repo=repo, git_helper=git_helper)
        for repo, git_helper in synced
    ]


def draft_release_notes(
    parsed: argparse.Namespace,
    prompt: rnr.Prompt | None=None,
    token_prompt: rnr.Prompt | None=None,
) -> str:
    '''
    runs the whole pipeline, and writes the release-notes draft. returns the path written to
    '''
    cfg = rnc.load_cfg(parsed.cfg)
    scratch_dir = parsed.scratch_dir or cfg.scratch_dir
    out_file = parsed.out or cfg.out_file

    union_git_helper = gitutil.GitHelper(repo=parsed.repo_worktree)

    repo_commits = collect_repo_commits(
        union_git_helper=union_git_helper,
        cfg=cfg,
        scratch_dir=scratch_dir,
        prompt=prompt,
        start_version=parsed.start_version,
        end_version=parsed.end_version,
    )

    if not (token := parsed.github_auth_token):
        token_prompt = token_prompt or getpass.getpass
        token = token_prompt(TOKEN_PROMPT).strip()

    github_api = github.github_api(
        token=token,
        github_url=cfg.github_url,
    )

    notes = rnmd.render(
        repo_commits=repo_commits,
        username_lookup=github.user.UsernameLookup(github=github_api),
        cfg=cfg,
    )

    with open(out_file, 'w') as f:
        f.write(notes)

    logger.info(f'Done writing notes to {out_file}')
    return out_file


def main(argv=None):
    parsed = parse_args(argv)
    ci.log.configure_default_logging(
        stdout_level=logging.DEBUG if parsed.verbose else logging.INFO,
    )

    try:
        draft_release_notes(parsed)
    except (
        rnm.ReleaseNotesError,
        git.exc.GitError,
        github3.exceptions.GitHubException,
        dacite.DaciteError,
        ValueError,
        EOFError,
    ) as e:
        ci.util.error(str(e) or type(e).__name__)
        sys.exit(1)

    sys.exit(0)


if __name__ == '__main__':
    main()
