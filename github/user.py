import logging

import cachetools
import github3.exceptions
import github3.github

logger = logging.getLogger(__name__)

_username_cache = cachetools.TTLCache(maxsize=512, ttl=60*60*12) # 12h


class UsernameLookup:
    '''
    resolves commit-author email addresses to GitHub usernames, as git logs do not carry them.

    Lookups are done using GitHub's user-search (`<email> in:email`). Emails that cannot be
    resolved (no match, private email, or API errors) are returned as-is.
    '''
    def __init__(
        self,
        github: github3.github.GitHub,
        cache: cachetools.Cache=_username_cache,
    ):
        self.github = github
        self.cache = cache

    def _search(self, email: str) -> str | None:
        for result in self.github.search_users(f'{email} in:email', number=1):
            return result.user.login
        return None

    def __call__(self, email: str) -> str:
        if not email:
            return email

        if (self.github, email) in self.cache:
            return self.cache[(self.github, email)]

        try:
            username = self._search(email)
        except github3.exceptions.NotFoundError:
            logger.warning(f'{email=} not found')
            username = None
        except github3.exceptions.ForbiddenError as fbe:
            # typically caused by exceeded (search-)quota - do not cache
            logger.warning(f'{fbe.errors=} {fbe.message=} - falling back to {email=}')
            return email

        if not username:
            logger.info(f'did not find a github-user for {email=}')
            username = email

        self.cache[(self.github, email)] = username
        return username
