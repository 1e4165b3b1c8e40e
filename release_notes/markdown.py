'''
renders release-notes drafts as markdown.

Commits are grouped by repository, and bucketed by tags committers may add to the commit-message
body. A tag is an upper-case word at the beginning of a line, optionally followed by a short
description, which is used as release-note text instead of the commit subject:

    Add conv3d op (#1234)

    FEATURE add support for 3D convolutions
    PERF

Commits w/o tags are added to a fallback bucket; commits tagged w/ an ignored tag (e.g. INTERNAL)
are omitted.
'''

import collections
import collections.abc
import dataclasses
import functools
import logging
import re

import release_notes.cfg as rnc
import release_notes.model as rnm

logger = logging.getLogger(__name__)

UsernameLookup = collections.abc.Callable[[str], str]


@functools.total_ordering
@dataclasses.dataclass
class Bucket:
    display: str
    identifiers: list[str]
    priority: int

    def __hash__(self):
        return hash(self.display)

    def __eq__(self, other):
        return isinstance(other, Bucket) and hash(other) == hash(self)

    def __lt__(self, other):
        if not isinstance(other, Bucket):
            raise ValueError(other)
        return self.priority < other.priority


default_buckets = [
    Bucket(display='Breaking Changes', identifiers=['BREAKING'], priority=0),
    Bucket(display='Features', identifiers=['FEATURE'], priority=1),
    Bucket(display='Bug fixes', identifiers=['BUG'], priority=2),
    Bucket(display='Performance', identifiers=['PERF'], priority=3),
    Bucket(display='Security', identifiers=['SECURITY'], priority=4),
    Bucket(display='Development', identifiers=['DEV'], priority=5),
    Bucket(display='Documentation', identifiers=['DOC', 'DOCS'], priority=6),
    Bucket(display='Misc', identifiers=['MISC'], priority=7),
]

_tag_line_pattern = re.compile(r'^(?P<tag>[A-Z][A-Z_]*):?(?:[^\S\n]+(?P<text>.*))?$')
_pull_request_suffix_pattern = re.compile(r'\s*\(#(?P<number>\d+)\)\s*$')


@dataclasses.dataclass(frozen=True)
class Entry:
    commit: rnm.Commit
    text: str


class TagBucketPolicy:
    def __init__(
        self,
        buckets: collections.abc.Iterable[Bucket]=default_buckets,
        ignored_tags: collections.abc.Iterable[str]=('INTERNAL',),
        fallback_bucket: str='Misc',
    ):
        self.buckets = sorted(buckets)
        self.ignored_tags = frozenset(ignored_tags)
        self.buckets_by_tag: dict[str, Bucket] = {
            tag: bucket for bucket in self.buckets for tag in bucket.identifiers
        }

        for bucket in self.buckets:
            if bucket.display == fallback_bucket:
                self.fallback_bucket = bucket
                break
        else:
            # sort fallback-bucket last
            self.fallback_bucket = Bucket(
                display=fallback_bucket,
                identifiers=[],
                priority=max((b.priority for b in self.buckets), default=0) + 1,
            )

    def bucketed_entries(self, commit: rnm.Commit) -> list[tuple[Bucket, Entry]]:
        '''
        returns the release-note entries for the given commit, along with the bucket they belong
        to. An empty list is returned for commits tagged w/ one of the ignored tags.
        '''
        subject = subject_without_pull_request(commit.subject)
        entries = []

        for line in commit.body.splitlines():
            if not (match := _tag_line_pattern.match(line.strip())):
                continue
            tag = match.group('tag')

            if tag in self.ignored_tags:
                logger.debug(f'ignoring {commit.sha} (tagged {tag})')
                return []

            if not (bucket := self.buckets_by_tag.get(tag)):
                continue

            text = (match.group('text') or '').strip() or subject
            entries.append((bucket, Entry(commit=commit, text=text)))

        if not entries:
            entries.append((self.fallback_bucket, Entry(commit=commit, text=subject)))

        return entries


def policy_from_cfg(cfg: rnc.ReleaseNotesCfg) -> TagBucketPolicy:
    if cfg.buckets is None:
        buckets = default_buckets
    else:
        buckets = [
            Bucket(
                display=bucket_cfg.display,
                identifiers=list(bucket_cfg.identifiers),
                priority=bucket_cfg.priority,
            ) for bucket_cfg in cfg.buckets
        ]

    return TagBucketPolicy(
        buckets=buckets,
        ignored_tags=cfg.ignored_tags,
        fallback_bucket=cfg.fallback_bucket,
    )


def subject_without_pull_request(subject: str) -> str:
    return _pull_request_suffix_pattern.sub('', subject).strip()


def pull_request_number(subject: str) -> str | None:
    if not (match := _pull_request_suffix_pattern.search(subject)):
        return None
    return match.group('number')


@dataclasses.dataclass
class Header:
    level: int
    title: str

    def __str__(self):
        return f"{'#' * self.level} {self.title}\n"  # there should be a new line after the header


@dataclasses.dataclass
class ListItem:
    level: int
    text: str

    def __str__(self):
        return f"{'  ' * (self.level - 1)}- {self.text}"


@dataclasses.dataclass
class Paragraph:
    text: str

    def __str__(self):
        return self.text


def reference_for_commit(commit: rnm.Commit, repo_url: str) -> str:
    if pr_number := pull_request_number(commit.subject):
        return f'[#{pr_number}]({repo_url}/pull/{pr_number})'

    return f'[{commit.sha[:7]}]({repo_url}/commit/{commit.sha})'


def list_item_from_entry(
    entry: Entry,
    repo_url: str,
    username_lookup: UsernameLookup,
) -> ListItem:
    reference = reference_for_commit(entry.commit, repo_url)
    text = f'{entry.text} ({reference}).'

    # commits w/o author-email are rendered w/o thanks
    if username := username_lookup(entry.commit.author_email):
        # unresolved authors are rendered by their email-address
        if '@' not in username:
            username = f'@{username}'
        text = f'{text} Thanks, {username}.'

    return ListItem(
        level=1,
        text=text,
    )


def render_objs(
    repo_commits: collections.abc.Iterable[rnm.RepoCommits],
    username_lookup: UsernameLookup,
    cfg: rnc.ReleaseNotesCfg,
    policy: TagBucketPolicy,
) -> list[Header | ListItem | Paragraph]:
    objs = []

    for rc in repo_commits:
        objs.append(Header(
            level=2,
            title=f'{rc.repo.name} ({rc.start_version} ==> {rc.end_version})',
        ))

        buckets: dict[Bucket, list[Entry]] = collections.defaultdict(list)
        for commit in rc.commits:
            for bucket, entry in policy.bucketed_entries(commit):
                buckets[bucket].append(entry)

        if not buckets:
            objs.append(Paragraph(text='No changes.'))
            continue

        repo_url = cfg.web_url(rc.repo)

        # sort by bucket-priority, ascending. This will keep the order of entries stable.
        for bucket, entries in sorted(buckets.items(), key=lambda item: item[0]):
            objs.append(Header(level=3, title=bucket.display))
            for entry in entries:
                objs.append(list_item_from_entry(
                    entry=entry,
                    repo_url=repo_url,
                    username_lookup=username_lookup,
                ))

    return objs


def render(
    repo_commits: collections.abc.Iterable[rnm.RepoCommits],
    username_lookup: UsernameLookup,
    cfg: rnc.ReleaseNotesCfg,
    policy: TagBucketPolicy | None=None,
) -> str:
    '''
    returns the release-notes draft for the given commits as markdown, grouped by repository (in
    the given order), and bucketed according to the given policy (defaults to the policy
    configured in `cfg`).
    '''
    if policy is None:
        policy = policy_from_cfg(cfg)

    lines = []
    previous_obj = None
    for obj in render_objs(
        repo_commits=repo_commits,
        username_lookup=username_lookup,
        cfg=cfg,
        policy=policy,
    ):
        # separate sections by an empty line (headers already end w/ one)
        if isinstance(obj, Header) and previous_obj and not isinstance(previous_obj, Header):
            lines.append('')
        lines.append(str(obj))
        previous_obj = obj

    return '\n'.join(lines) + '\n'
