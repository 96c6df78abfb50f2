from pathlib import Path
from typing import Iterable, List, Mapping

from gitlab_contributors.models.schemas import Contributor


class IdentityResolver:
    """Decides which contributor key a commit author is recorded under.

    Display names are first-seen-wins: a later author with the same name but
    a different email is a different person and gets the name plus the
    duplicate marker. Only a matching email is treated as the same person.
    """

    def __init__(self, duplicate_marker: str = '(duplicate)'):
        self.duplicate_marker = duplicate_marker

    def resolve(self, name: str, email: str, contributors: Mapping[str, Contributor]) -> str:
        existing = contributors.get(name)
        if existing is not None and existing.email != email:
            return f"{name}{self.duplicate_marker}"
        return name


class AuthorFilter:
    """Excludes no-reply and bot authors from aggregation; emails compare exactly"""

    def __init__(self, suffixes: Iterable[str] = (), emails: Iterable[str] = ()):
        self.suffixes = tuple(s for s in suffixes if s)
        self.emails = frozenset(e for e in emails if e)

    def is_excluded(self, email: str) -> bool:
        return email in self.emails or any(email.endswith(s) for s in self.suffixes)

    def with_emails(self, emails: Iterable[str]) -> 'AuthorFilter':
        return AuthorFilter(self.suffixes, self.emails | set(emails))


def load_exclusion_file(path: Path) -> List[str]:
    """Read one email per line, skipping blanks and ``#`` comments"""
    emails = []
    for line in Path(path).read_text(encoding='utf-8').splitlines():
        line = line.split('#', 1)[0].strip()
        if line:
            emails.append(line)
    return emails


def prior_entry(key: str, name: str, email: str, contributors: Mapping[str, Contributor]):
    """Existing (key, contributor) an author's commit carries forward, if any.

    The entry under the resolved ``key`` wins when it belongs to the same
    email. Otherwise an entry keyed by the email, then one keyed by the
    display name, is carried forward; a name entry owned by another email is
    a different person and is skipped.
    """
    current = contributors.get(key)
    if current is not None and current.email == email:
        return key, current

    for candidate in (email, name):
        contributor = contributors.get(candidate)
        if contributor is None or not contributor.contributions_count:
            continue
        if candidate == name and contributor.email != email:
            continue
        return candidate, contributor
    return None
