# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import urllib.parse

import github3


def hostname(github_url: str) -> str:
    '''
    returns the hostname of the given github-url (which may or may not have a schema)
    '''
    if '://' not in github_url:
        github_url = f'https://{github_url}'
    return urllib.parse.urlparse(github_url).netloc


def repo_url(
    github_url: str,
    org: str,
    repo: str,
) -> str:
    return '/'.join((github_url.rstrip('/'), org, repo))


def github_api(
    token: str,
    github_url: str='https://github.com',
) -> github3.GitHub | github3.GitHubEnterprise:
    '''
    returns an initialised (token-authenticated) github-api instance. For github.com, the public
    API is used; other hosts are assumed to be GitHub-Enterprise-instances.
    '''
    if hostname(github_url) == 'github.com':
        return github3.GitHub(token=token)

    return github3.GitHubEnterprise(
        url=github_url,
        token=token,
    )
