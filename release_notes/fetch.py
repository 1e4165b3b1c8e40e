import logging

import gitutil
import release_notes.model as rnm

logger = logging.getLogger(__name__)


# subject, body, author-email, commit-digest (order matches `rnm.Commit`'s fields)
COMMIT_FIELD_QUERIES = ('%s', '%b', '%aE', '%H')

# unlikely to be contained in commit-messages, so the log may safely be split using them
FIELD_DELIMITER = '--^^&&'
RECORD_DELIMITER = '--&&^^'


def log_format(field_queries=COMMIT_FIELD_QUERIES) -> str:
    return FIELD_DELIMITER.join(field_queries) + RECORD_DELIMITER


def version_query(repo: rnm.Repo) -> str:
    '''
    returns the revision range to query commits for. If the start version is a tag, a tag-to-tag
    range is used. Otherwise (dependency was not tagged at start), the range starts at the
    (synthetic) start commit. The start commit itself is excluded from `a..b` ranges, so the root
    commit of a newly added dependency does not show up.
    '''
    if not repo.end_version:
        raise rnm.ReleaseNotesError(f'end version of {repo.identifier} was not resolved')

    if repo.start_version is not None:
        return f'{repo.start_version}..{repo.end_version}'

    if not repo.start_commit:
        raise rnm.ReleaseNotesError(f'neither start version nor commit known for {repo.identifier}')

    return f'{repo.start_commit}..{repo.end_version}'


def parse_log_output(output: str) -> list[rnm.Commit]:
    '''
    parses output of `git log` run with `log_format()` into commits. Exactly one commit is
    returned per record delimiter.
    '''
    records = output.split(RECORD_DELIMITER)
    # text after the last delimiter is not a record (empty, or trailing newline)
    records = records[:-1]

    commits = []
    for record in records:
        fields = [field.strip() for field in record.split(FIELD_DELIMITER)]
        if len(fields) != len(COMMIT_FIELD_QUERIES):
            raise rnm.ReleaseNotesError(
                f'expected {len(COMMIT_FIELD_QUERIES)} fields, found {len(fields)}: {record=}'
            )
        subject, body, author_email, sha = fields
        commits.append(rnm.Commit(
            subject=subject,
            body=body,
            author_email=author_email,
            sha=sha,
        ))

    return commits


def fetch_repo_commits(
    repo: rnm.Repo,
    git_helper: gitutil.GitHelper,
) -> rnm.RepoCommits:
    logger.info(f'{repo.name}: {repo.start_version} =====> {repo.end_version}')
    logger.info('Querying commits...')

    output = git_helper.log(
        revision_range=version_query(repo),
        pretty_format=log_format(),
    )
    commits = parse_log_output(output)
    logger.info(f'found {len(commits)} commit(s) for {repo.identifier}')

    return rnm.RepoCommits(
        repo=repo,
        start_version=repo.start_version,
        end_version=repo.end_version,
        start_commit=repo.start_commit,
        commits=tuple(commits),
    )
