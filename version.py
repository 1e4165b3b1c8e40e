# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import logging
import typing

import semver

logger = logging.getLogger(__name__)

Version = semver.VersionInfo | str

# leading characters of npm-style version ranges pinning a single version (e.g. `^1.2.3`)
_RANGE_OPERATOR_CHARS = '^~=<> '


def parse_to_semver(
    version,
    invalid_semver_ok: bool=False,
) -> semver.VersionInfo | None:
    '''
    parses the given version into a semver.VersionInfo object.

    Different from strict semver, the given version is preprocessed, if required, to
    convert the version into a valid semver version, if possible.

    The following preprocessings are done:

    - strip away `v` prefix
    - append patch-level `.0` for two-digit versions
    - rm leading zeroes
    '''
    if isinstance(version, semver.VersionInfo):
        return version
    if version is None:
        raise ValueError('version must not be None')

    try:
        semver_version_info, _ = _parse_to_semver_and_prefix(str(version))
    except ValueError:
        if invalid_semver_ok:
            return None

        raise

    return semver_version_info


def _parse_to_semver_and_prefix(version: str) -> tuple[semver.VersionInfo, str | None]:
    def raise_invalid():
        raise ValueError(f'not a valid (semver) version: `{version}`')

    if not version:
        raise_invalid()

    semver_version = version
    prefix = None

    # strip leading `v`
    if version[0] == 'v':
        semver_version = version[1:]
        prefix = 'v'

    # in most cases, we should be fine now
    try:
        return semver.VersionInfo.parse(semver_version), prefix
    except ValueError:
        pass # try extending `.0` as patch-level

    # blindly append patch-level
    if '-' in version:
        sep = '-'
    else:
        sep = '+'

    numeric, sep, suffix = semver_version.partition(sep)
    if numeric.count('.') == 1:
        numeric += '.0'

    try:
        return semver.VersionInfo.parse(numeric + sep + suffix), prefix
    except ValueError:
        pass # last try: strip leading zeroes

    try:
        major, minor, patch = numeric.split('.')
        numeric = '.'.join((
            str(int(major)),
            str(int(minor)),
            str(int(patch)),
        ))
    except ValueError:
        raise_invalid()

    try:
        return semver.VersionInfo.parse(numeric + sep + suffix), prefix
    except ValueError:
        # re-raise with original version str
        raise_invalid()


def is_semver_parseable(version_string: str):
    try:
        parse_to_semver(version_string)
    except ValueError:
        logger.debug(f"Could not parse '{version_string}' as semver version")
        return False
    return True


T = typing.TypeVar('T', semver.VersionInfo, str)


def greatest_version(
    versions: typing.Iterable[T],
    ignore_prerelease_versions: bool=False,
    invalid_semver_ok: bool=False,
) -> T | None:
    '''
    returns the greatest version from the passed versions. versions are parsed as semver versions
    using relaxed semver (which allows a `v` prefix, as well as omitting the patchlevel).
    if `ignore_prerelease_versions` is set to True, only final release versions will be considered.
    if `invalid_semver_ok` is set to True, versions that are not valid (relaxed) semver versions
    are silently ignored (will raise otherwise).
    '''
    greatest_candidate = None
    greatest_candidate_semver = None

    for candidate in versions:
        candidate_semver = parse_to_semver(
            version=candidate,
            invalid_semver_ok=invalid_semver_ok,
        )
        if not candidate_semver:
            continue

        if ignore_prerelease_versions and candidate_semver.prerelease:
            continue

        if not greatest_candidate_semver or candidate_semver > greatest_candidate_semver:
            greatest_candidate_semver = candidate_semver
            greatest_candidate = candidate

    return greatest_candidate


def pinned_version(version_range: str | None) -> str | None:
    '''
    returns the version pinned by the given (npm-style) version specifier, stripping range
    operators such as `^` or `~`. `None` is passed through (dependency is absent).
    '''
    if version_range is None:
        return None

    pinned = version_range.strip().lstrip(_RANGE_OPERATOR_CHARS)
    if not pinned:
        raise ValueError(f'not a pinned version: `{version_range}`')

    return pinned
