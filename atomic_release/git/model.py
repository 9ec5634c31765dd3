from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Person:
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as reported by ``git log``.

    Attributes:
        hash: Full object name
        subject: First line of the message
        body: Remaining message lines
        notes: Attached git notes (empty when none)
        tags: Tag names pointing at this commit, in ref order
        committed_timestamp: Commit date, epoch milliseconds
        author: Commit author
        committer: Commit committer
    """

    hash: str
    subject: str
    body: str
    notes: str
    tags: tuple[str, ...]
    committed_timestamp: int
    author: Person
    committer: Person

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass(frozen=True, slots=True)
class MergedTag:
    name: str
    hash: str
