'''
Release Notes Drafter

Drafts release notes for a union package (a package pinning versions of several dependency
packages, each living in its own repository).

The union's version range is mapped to version ranges of its dependencies by reading the union's
manifest (`package.json`) at the earliest and latest commit of the range. Each dependency
repository is cloned into a scratch directory, commits are collected for each range, and rendered
into a markdown draft, grouped by repository and bucketed by tags found in commit messages.

See `release_notes.cli` for usage.
'''
