import collections.abc
import logging

import ci.util
import release_notes.model as rnm
import version

logger = logging.getLogger(__name__)

Prompt = collections.abc.Callable[[str], str]


def newest_version(valid_versions: collections.abc.Sequence[str]) -> str:
    '''
    returns the greatest of the given versions (relaxed semver, `v`-prefix allowed). If any of the
    versions is not semver-parseable, the last version is returned (git lists tags sorted
    alphabetically).
    '''
    if not valid_versions:
        raise rnm.ReleaseNotesError('no versions (tags) found')

    if all(version.is_semver_parseable(v) for v in valid_versions):
        return version.greatest_version(valid_versions)

    return valid_versions[-1]


def ask_user_for_versions(
    valid_versions: collections.abc.Sequence[str],
    package_name: str,
    prompt: Prompt | None=None,
    start_version: str | None=None,
    end_version: str | None=None,
) -> rnm.VersionRange:
    '''
    asks the user for a start- and end-version, both of which must be contained in
    `valid_versions`. An empty end-version defaults to the newest version.

    `start_version` and `end_version` may be passed to skip the respective question (they are
    validated nevertheless).
    `prompt` defaults to `input`.

    raises `UnknownVersion` if an entered version is not contained in `valid_versions`
    '''
    prompt = prompt or input
    ci.util.print_coloured(f'{package_name} versions', colour='yellow')
    print(', '.join(valid_versions))

    if start_version is None:
        start_version = prompt('Enter the union start version: ').strip()
    if start_version not in valid_versions:
        raise rnm.UnknownVersion(kind='start', version=start_version)

    default_version = newest_version(valid_versions)
    if end_version is None:
        end_version = prompt(
            f'Enter the union end version (leave empty for {default_version}): '
        ).strip()
    if not end_version:
        end_version = default_version
    if end_version not in valid_versions:
        raise rnm.UnknownVersion(kind='end', version=end_version)

    logger.info(f'{package_name}: {start_version} =====> {end_version}')

    return rnm.VersionRange(
        start_version=start_version,
        end_version=end_version,
    )
