"""Conventional commit parsing.

A raw commit is the message subject and body, optionally followed by
extra field blocks (``-hash-``, ``-gitTags-``, ``-committerDate-``) whose
value is the next line. The header is matched against
``ParserOptions.header_pattern`` and its groups are stored under
``header_correspondence`` names, so a custom parser configuration can
omit ``type`` entirely.

Usage:
    commit = parse_commit("feat(api)!: drop v1\\n\\ncloses #12")
    assert commit.type == "feat"
    assert commit.is_breaking
    assert [r.issue for r in commit.references] == ["12"]
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

__all__ = [
    "ConventionalCommit",
    "Note",
    "ParserOptions",
    "Reference",
    "parse_commit",
]

_DEFAULT_ACTIONS = (
    "close",
    "closes",
    "closed",
    "fix",
    "fixes",
    "fixed",
    "resolve",
    "resolves",
    "resolved",
)
# @handle, but not the domain part of an email address
_MENTION_RE = re.compile(r"(?<![\w.])@([\w-]+)")


@dataclass(frozen=True, slots=True)
class ParserOptions:
    header_pattern: str = r"^(\w*)(?:\((.*)\))?!?: (.*)$"
    breaking_header_pattern: str = r"^(\w*)(?:\((.*)\))?!: (.*)$"
    header_correspondence: tuple[str, ...] = ("type", "scope", "subject")
    note_keywords: tuple[str, ...] = ("BREAKING CHANGE", "BREAKING-CHANGE")
    issue_prefixes: tuple[str, ...] = ("#",)
    reference_actions: tuple[str, ...] = _DEFAULT_ACTIONS
    merge_pattern: str | None = r"^Merge pull request #(\d+) from (.*)$"
    merge_correspondence: tuple[str, ...] = ("id", "source")
    revert_pattern: str = r'^(?:Revert|revert:)\s"?([\s\S]+?)"?\s*This reverts commit (\w*)\.'
    field_pattern: str = r"^-(.*?)-$"


@dataclass(frozen=True, slots=True)
class Note:
    title: str
    text: str


@dataclass(frozen=True, slots=True)
class Reference:
    """An issue mentioned by a commit (``closes acme/widgets#12``)."""

    issue: str
    action: str | None = None
    owner: str | None = None
    repository: str | None = None
    prefix: str = "#"
    raw: str = ""


@dataclass(frozen=True, slots=True)
class ConventionalCommit:
    header: str
    fields: dict[str, str | None] = field(default_factory=dict[str, str | None])
    body: str | None = None
    footer: str | None = None
    notes: tuple[Note, ...] = ()
    references: tuple[Reference, ...] = ()
    mentions: tuple[str, ...] = ()
    merge: dict[str, str | None] | None = None
    revert: dict[str, str] | None = None
    extra: dict[str, str] = field(default_factory=dict[str, str])

    def has_field(self, name: str) -> bool:
        return name in self.fields

    @property
    def type(self) -> str | None:
        return self.fields.get("type")

    @property
    def scope(self) -> str | None:
        return self.fields.get("scope")

    @property
    def subject(self) -> str | None:
        return self.fields.get("subject")

    @property
    def hash(self) -> str | None:
        return self.extra.get("hash")

    @property
    def short_hash(self) -> str | None:
        h = self.hash
        return h[:7] if h else None

    @property
    def is_breaking(self) -> bool:
        return bool(self.notes)


def _reference_re(options: ParserOptions) -> re.Pattern[str]:
    prefixes = "|".join(re.escape(p) for p in options.issue_prefixes)
    return re.compile(rf"(?:([\w.-]+)/([\w.-]+))?({prefixes})(\d+)\b")


def _action_re(options: ParserOptions) -> re.Pattern[str]:
    words = "|".join(re.escape(a) for a in sorted(options.reference_actions, key=len, reverse=True))
    return re.compile(rf"\b({words})\b", re.IGNORECASE)


def _references(line: str, options: ParserOptions) -> list[Reference]:
    """References on one line; an action keyword applies to the references after it."""
    action_matches = list(_action_re(options).finditer(line))
    refs: list[Reference] = []
    for m in _reference_re(options).finditer(line):
        action: str | None = None
        for a in action_matches:
            if a.start() < m.start():
                action = a.group(1)
        refs.append(
            Reference(
                issue=m.group(4),
                action=action,
                owner=m.group(1),
                repository=m.group(2),
                prefix=m.group(3),
                raw=m.group(0),
            )
        )
    return refs


def _split_fields(lines: list[str], options: ParserOptions) -> tuple[list[str], dict[str, str]]:
    field_re = re.compile(options.field_pattern)
    message: list[str] = []
    extra: dict[str, str] = {}
    current: str | None = None
    for line in lines:
        m = field_re.match(line)
        if m is not None:
            current = m.group(1)
            extra[current] = ""
            continue
        if current is None:
            message.append(line)
        elif extra[current]:
            extra[current] += "\n" + line
        else:
            extra[current] = line
    return message, extra


def _trimmed(lines: list[str]) -> str | None:
    text = "\n".join(lines).strip()
    return text or None


def parse_commit(raw: str, options: ParserOptions | None = None) -> ConventionalCommit:
    """Parse one raw commit. Never fails; unmatched headers leave every header field None."""
    opts = options or ParserOptions()
    message, extra = _split_fields(raw.strip("\n").split("\n"), opts)
    header = message[0] if message else ""
    rest = message[1:]

    merge: dict[str, str | None] | None = None
    if opts.merge_pattern:
        mm = re.match(opts.merge_pattern, header)
        if mm is not None:
            merge = dict(zip(opts.merge_correspondence, mm.groups()))
            # The real header of a merge commit is the first body line.
            if rest and rest[0].strip():
                header, rest = rest[0], rest[1:]
            elif len(rest) > 1 and rest[0] == "":
                header, rest = rest[1], rest[2:]

    hm = re.match(opts.header_pattern, header)
    groups = hm.groups() if hm is not None else ()
    fields: dict[str, str | None] = {}
    for i, name in enumerate(opts.header_correspondence):
        fields[name] = groups[i] if i < len(groups) else None

    note_re = re.compile(rf"^[\s|*]*({'|'.join(re.escape(k) for k in opts.note_keywords)})[:\s]+(.*)")
    body_lines: list[str] = []
    footer_lines: list[str] = []
    notes: list[Note] = []
    references: list[Reference] = _references(header, opts)
    in_footer = False
    for line in rest:
        nm = note_re.match(line)
        refs = _references(line, opts)
        line_has_action = any(r.action for r in refs)
        if nm is not None:
            in_footer = True
            notes.append(Note(title=nm.group(1), text=nm.group(2).strip()))
            footer_lines.append(line)
            continue
        if refs:
            references.extend(refs)
        if line_has_action:
            in_footer = True
        if in_footer:
            if notes and not refs and line.strip():
                last = notes[-1]
                notes[-1] = Note(last.title, f"{last.text}\n{line}".strip())
            footer_lines.append(line)
        else:
            body_lines.append(line)

    if merge is not None and header != message[0]:
        references.extend(_references(message[0], opts))

    if not notes and re.match(opts.breaking_header_pattern, header):
        subject = fields.get("subject") or header
        notes.append(Note(title=opts.note_keywords[0], text=subject))

    revert: dict[str, str] | None = None
    rm = re.match(opts.revert_pattern, "\n".join(message))
    if rm is not None:
        revert = {"header": rm.group(1), "hash": rm.group(2)}

    seen: set[tuple[str | None, str | None, str]] = set()
    unique_refs: list[Reference] = []
    for ref in references:
        key = (ref.owner, ref.repository, ref.issue)
        if key not in seen:
            seen.add(key)
            unique_refs.append(ref)

    text = "\n".join(message)
    mentions = tuple(dict.fromkeys(_MENTION_RE.findall(text)))

    return ConventionalCommit(
        header=header,
        fields=fields,
        body=_trimmed(body_lines),
        footer=_trimmed(footer_lines),
        notes=tuple(notes),
        references=tuple(unique_refs),
        mentions=mentions,
        merge=merge,
        revert=revert,
        extra={k: v.strip() for k, v in extra.items()},
    )
