"""Turn free-text model output into validated content-document fragments.

Parsing never raises. Each call returns a :class:`ParseOutcome` tagged
with a :class:`ParseStatus`:

``ok``
    Structured data was found and every section it carried validated.
``partial``
    Structured data was found but some sections or list entries were
    unusable and fell back to their defaults.
``fallback``
    No structured data could be recovered. Whole-document parses return
    the empty default document; section parses wrap the raw text into the
    section's primary text field.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from portfolio_forge.services.content_schema import (
    LIST_SECTIONS,
    PRIMARY_TEXT_FIELD,
    SECTIONS,
    ContentDocument,
    Project,
    coerce_document,
    coerce_section,
    default_content,
    section_field_names,
    validate_section_name,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ParseOutcome",
    "ParseStatus",
    "extract_structured",
    "parse_bio",
    "parse_document",
    "parse_project_descriptions",
    "parse_resume",
    "parse_section",
]

_FENCED_JSON = re.compile(r"```(?:json|JSON)[ \t]*\r?\n(.*?)\r?\n?```", re.DOTALL)


class ParseStatus(StrEnum):
    OK = "ok"
    PARTIAL = "partial"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ParseOutcome:
    """Result of parsing one model reply.

    Attributes:
        status: How much of the reply was usable.
        value: A :class:`ContentDocument` for document parses, the validated
            section value for section parses.
        issues: Human-readable notes on anything that was dropped or defaulted.
    """

    status: ParseStatus
    value: Any
    issues: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return self.status is not ParseStatus.OK


def extract_structured(raw: str) -> Any | None:
    """Return the JSON value carried by *raw*, or ``None``.

    Tries the whole text first, then each fenced block labelled ``json``,
    then the span from the first opening bracket to the last closing
    one of the same kind (replies that wrap bare JSON in prose).
    """
    text = (raw or "").strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    for match in _FENCED_JSON.finditer(text):
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            logger.warning("Fenced JSON block in model reply did not parse")
    return _embedded_json(text)


def _embedded_json(text: str) -> Any | None:
    starts = [(text.find(opener), opener) for opener in "{["]
    for start, opener in sorted(s for s in starts if s[0] >= 0):
        end = text.rfind("}" if opener == "{" else "]")
        if end <= start:
            continue
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            continue
    return None


def parse_document(raw: str) -> ParseOutcome:
    """Parse a whole-document reply into a :class:`ContentDocument`."""
    data = extract_structured(raw)
    if not isinstance(data, Mapping):
        logger.warning("Model reply carried no JSON object; using default document")
        return ParseOutcome(
            status=ParseStatus.FALLBACK,
            value=default_content(),
            issues=["model reply did not contain a JSON object"],
        )

    if not any(section in data for section in SECTIONS):
        return ParseOutcome(
            status=ParseStatus.FALLBACK,
            value=default_content(),
            issues=["model reply contained none of the expected sections"],
        )

    document, issues = coerce_document(data)
    status = ParseStatus.PARTIAL if issues else ParseStatus.OK
    if issues:
        logger.warning("Model reply partially invalid: %s", "; ".join(issues))
    return ParseOutcome(status=status, value=document, issues=issues)


def _wrap_raw_text(section: str, raw: str, current: Any) -> Any:
    text_field = PRIMARY_TEXT_FIELD[section]
    text = raw.strip()
    if section in LIST_SECTIONS:
        items = [item.model_copy(deep=True) for item in current or []]
        if items:
            items[0] = items[0].model_copy(update={text_field: text})
            return items
        value, _ = coerce_section(section, [{text_field: text}])
        return value
    return current.model_copy(update={text_field: text}, deep=True)


def _describes_section(section: str, data: Any) -> bool:
    """False for structured replies that carry none of the section's fields."""
    fields = section_field_names(section)
    if data is None:
        return False
    if isinstance(data, Mapping):
        return not fields.isdisjoint(data)
    if isinstance(data, list) and data:
        return any(isinstance(item, Mapping) and not fields.isdisjoint(item) for item in data)
    return True


def parse_section(raw: str, section: str, document: ContentDocument) -> ParseOutcome:
    """Parse a reply destined for a single *section* of *document*.

    The reply may carry either ``{"<section>": value}`` or the bare value.
    Structured data that names none of the section's fields leaves the
    section unchanged. When nothing structured is found the raw text is kept
    by writing it into the section's primary text field.
    """
    validate_section_name(section)
    current = getattr(document, section)
    data = extract_structured(raw)

    if data is not None:
        if isinstance(data, Mapping) and section in data:
            data = data[section]
        if not _describes_section(section, data):
            logger.warning("Reply for section %s carried none of its fields", section)
            return ParseOutcome(
                status=ParseStatus.FALLBACK,
                value=current,
                issues=[f"reply did not describe section {section}; section unchanged"],
            )
        try:
            value, issues = coerce_section(section, data)
        except ValueError as exc:
            logger.warning("Section %s reply unusable: %s", section, exc)
        else:
            status = ParseStatus.PARTIAL if issues else ParseStatus.OK
            return ParseOutcome(status=status, value=value, issues=issues)

    if not (raw or "").strip():
        return ParseOutcome(
            status=ParseStatus.FALLBACK,
            value=current,
            issues=[f"empty reply for section {section}; section unchanged"],
        )

    return ParseOutcome(
        status=ParseStatus.FALLBACK,
        value=_wrap_raw_text(section, raw, current),
        issues=[f"unstructured reply for section {section}; stored as text"],
    )


def parse_resume(raw: str) -> ParseOutcome:
    """Parse a résumé pre-structuring reply into a partial document.

    ``value`` is a plain dict containing only the sections the reply
    actually provided, ready to be handed to the generation prompt.
    """
    outcome = parse_document(raw)
    document: ContentDocument = outcome.value
    dumped = document.to_dict()
    partial = {name: dumped[name] for name in SECTIONS if name in document.model_fields_set}
    return ParseOutcome(status=outcome.status, value=partial, issues=outcome.issues)


def parse_bio(raw: str) -> ParseOutcome:
    """Parse a bio reply; the value is plain text.

    Models sometimes answer with ``{"bio": "..."}`` or wrap the text in
    quotes despite being asked for bare prose. An empty reply is a
    ``fallback`` with an empty string.
    """
    data = extract_structured(raw)
    if isinstance(data, Mapping) and isinstance(data.get("bio"), str):
        text = data["bio"]
    elif isinstance(data, str):
        text = data
    else:
        text = raw or ""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    if not text:
        return ParseOutcome(status=ParseStatus.FALLBACK, value="", issues=["empty bio reply"])
    return ParseOutcome(status=ParseStatus.OK, value=text)


def _repository_project(repo: Mapping[str, Any], entry: Mapping[str, Any]) -> Project:
    languages = repo.get("languages") or ([repo["language"]] if repo.get("language") else [])
    base = {
        "title": repo.get("name"),
        "description": repo.get("description"),
        "tech_stack": languages,
        "github_url": repo.get("html_url") or repo.get("url"),
        "live_url": repo.get("homepage"),
    }
    generated = {
        "description": entry.get("description") or base["description"],
        "tech_stack": entry.get("tech_stack") or languages,
        "key_features": entry.get("key_features") or [],
    }
    try:
        return Project.model_validate({**base, **generated})
    except PydanticValidationError:
        return Project.model_validate(base)


def parse_project_descriptions(
    raw: str, repositories: Sequence[Mapping[str, Any]]
) -> ParseOutcome:
    """Match generated descriptions to *repositories*.

    The value is one :class:`Project` per repository, in input order.
    Entries are matched by title first and by position otherwise; a
    repository without a usable entry keeps its own description.
    """
    data = extract_structured(raw)
    if isinstance(data, Mapping):
        data = data.get("projects")
    entries = [e if isinstance(e, Mapping) else {} for e in data] if isinstance(data, list) else []
    by_title = {
        str(e["title"]).strip().lower(): e for e in entries if isinstance(e.get("title"), str)
    }

    issues: list[str] = []
    projects: list[Project] = []
    for index, repo in enumerate(repositories):
        name = str(repo.get("name") or "")
        entry = by_title.get(name.strip().lower())
        if entry is None and index < len(entries) and entries[index]:
            entry = entries[index]
        if entry is None or not entry.get("description"):
            issues.append(f"no description generated for {name}; repository description kept")
            entry = entry or {}
        projects.append(_repository_project(repo, entry))

    if not isinstance(data, list):
        logger.warning("Project description reply carried no JSON array")
        return ParseOutcome(
            status=ParseStatus.FALLBACK,
            value=projects,
            issues=["model reply did not contain a list of descriptions"],
        )
    status = ParseStatus.PARTIAL if issues else ParseStatus.OK
    return ParseOutcome(status=status, value=projects, issues=issues)
