"""Canonical portfolio content document and its defaulting/merge rules.

Every document carries the six top-level sections listed in
:data:`SECTIONS`. Values coming from a model are coerced leniently
(comma-separated strings become lists, ``None`` becomes the empty default)
and a section that still fails validation is replaced by its empty
default, so templates can rely on every key being present.

Merging uses pydantic's ``model_fields_set`` to tell "the model said
nothing about this field" apart from "the model set it", which is what the
"new overrides old, old fills gaps" rule needs.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from portfolio_forge.errors import ValidationError

__all__ = [
    "About",
    "Contact",
    "ContentDocument",
    "Education",
    "Experience",
    "Hero",
    "LIST_SECTIONS",
    "PRIMARY_TEXT_FIELD",
    "Project",
    "SECTIONS",
    "coerce_document",
    "coerce_section",
    "default_content",
    "dump_content",
    "load_content",
    "merge_documents",
    "merge_section",
    "section_field_names",
    "validate_section_name",
]

SECTIONS: tuple[str, ...] = ("hero", "about", "projects", "experience", "education", "contact")
LIST_SECTIONS: frozenset[str] = frozenset({"projects", "experience", "education"})

# Field that receives raw model text when a section-scoped reply is not structured.
PRIMARY_TEXT_FIELD: dict[str, str] = {
    "hero": "bio",
    "about": "description",
    "projects": "description",
    "experience": "description",
    "education": "description",
    "contact": "message",
}


def _as_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


def _as_text_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, list | tuple):
        out: list[str] = []
        for item in value:
            if isinstance(item, str):
                if item.strip():
                    out.append(item.strip())
            elif isinstance(item, Mapping):
                # e.g. {"name": "Python", "level": "expert"}
                name = item.get("name") or item.get("title")
                if isinstance(name, str) and name.strip():
                    out.append(name.strip())
            elif item is not None:
                out.append(str(item))
        return out
    return value


def _as_link_map(value: Any) -> Any:
    if value is None:
        return {}
    if isinstance(value, list | tuple):
        links: dict[str, str] = {}
        for item in value:
            if isinstance(item, Mapping):
                platform = item.get("platform") or item.get("name")
                url = item.get("url") or item.get("href")
                if isinstance(platform, str) and isinstance(url, str):
                    links[platform.lower()] = url
        return links
    if isinstance(value, Mapping):
        return {str(k): str(v) for k, v in value.items() if v is not None}
    return value


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Hero(_Section):
    name: str = ""
    title: str = ""
    bio: str = ""
    image: str = ""
    social_links: dict[str, str] = Field(default_factory=dict)

    coerce_text = field_validator("name", "title", "bio", "image", mode="before")(_as_text)
    coerce_links = field_validator("social_links", mode="before")(_as_link_map)


class About(_Section):
    description: str = ""
    skills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)

    coerce_text = field_validator("description", mode="before")(_as_text)
    coerce_lists = field_validator("skills", "interests", mode="before")(_as_text_list)


class Project(_Section):
    title: str = ""
    description: str = ""
    tech_stack: list[str] = Field(default_factory=list)
    github_url: str = ""
    live_url: str = ""
    image: str = ""
    key_features: list[str] = Field(default_factory=list)

    coerce_text = field_validator(
        "title", "description", "github_url", "live_url", "image", mode="before"
    )(_as_text)
    coerce_lists = field_validator("tech_stack", "key_features", mode="before")(_as_text_list)


class Experience(_Section):
    company: str = ""
    title: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""
    highlights: list[str] = Field(default_factory=list)

    coerce_text = field_validator(
        "company", "title", "location", "start_date", "end_date", "description", mode="before"
    )(_as_text)
    coerce_lists = field_validator("highlights", mode="before")(_as_text_list)


class Education(_Section):
    institution: str = ""
    degree: str = ""
    field: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""

    coerce_text = field_validator(
        "institution", "degree", "field", "start_date", "end_date", "description", mode="before"
    )(_as_text)


class Contact(_Section):
    email: str = ""
    phone: str = ""
    location: str = ""
    message: str = ""
    social_links: dict[str, str] = Field(default_factory=dict)

    coerce_text = field_validator("email", "phone", "location", "message", mode="before")(_as_text)
    coerce_links = field_validator("social_links", mode="before")(_as_link_map)


_SECTION_MODELS: dict[str, type[_Section]] = {
    "hero": Hero,
    "about": About,
    "projects": Project,
    "experience": Experience,
    "education": Education,
    "contact": Contact,
}


class ContentDocument(BaseModel):
    """The canonical portfolio document."""

    model_config = ConfigDict(extra="ignore")

    hero: Hero = Field(default_factory=Hero)
    about: About = Field(default_factory=About)
    projects: list[Project] = Field(default_factory=list)
    experience: list[Experience] = Field(default_factory=list)
    education: list[Education] = Field(default_factory=list)
    contact: Contact = Field(default_factory=Contact)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def section(self, name: str) -> Any:
        validate_section_name(name)
        return getattr(self, name)

    def section_dict(self, name: str) -> Any:
        return self.to_dict()[validate_section_name(name)]


def default_content() -> ContentDocument:
    """Return a document with every section at its empty default."""
    return ContentDocument()


def validate_section_name(section: str) -> str:
    """Return *section* if it names a content section.

    Raises:
        ValidationError: If *section* is not one of :data:`SECTIONS`.
    """
    if section not in SECTIONS:
        msg = f"Unknown section {section!r}. Expected one of: {', '.join(SECTIONS)}"
        raise ValidationError(msg)
    return section


def section_field_names(section: str) -> frozenset[str]:
    """Field names of one section entry, e.g. ``description`` and ``skills`` for ``about``."""
    validate_section_name(section)
    return frozenset(_SECTION_MODELS[section].model_fields)


def coerce_section(section: str, value: Any) -> tuple[Any, list[str]]:
    """Validate *value* as the given section.

    List sections keep the entries that validate and drop the rest.

    Returns:
        ``(validated_value, issues)``.

    Raises:
        ValueError: If the value cannot be used for the section at all.
    """
    validate_section_name(section)
    model = _SECTION_MODELS[section]
    issues: list[str] = []

    if section in LIST_SECTIONS:
        if value is None:
            return [], issues
        if isinstance(value, Mapping):
            value = [value]
        if not isinstance(value, list | tuple):
            raise ValueError(f"{section} must be a list, got {type(value).__name__}")
        items = []
        for index, raw_item in enumerate(value):
            if not isinstance(raw_item, Mapping):
                issues.append(f"{section}[{index}] is not an object; dropped")
                continue
            try:
                items.append(model.model_validate(raw_item))
            except PydanticValidationError as exc:
                issues.append(f"{section}[{index}] invalid: {exc.error_count()} error(s); dropped")
        return items, issues

    if value is None:
        return model(), issues
    if not isinstance(value, Mapping):
        raise ValueError(f"{section} must be an object, got {type(value).__name__}")
    try:
        return model.model_validate(value), issues
    except PydanticValidationError as exc:
        raise ValueError(f"{section} invalid: {exc.error_count()} error(s)") from exc


def coerce_document(data: Mapping[str, Any]) -> tuple[ContentDocument, list[str]]:
    """Build a :class:`ContentDocument` from loosely-typed data.

    Sections are validated independently; a section that cannot be used is
    replaced by its empty default and reported in the returned issues. Only
    sections present in *data* are marked as set on the document.
    """
    issues: list[str] = []
    present: dict[str, Any] = {}
    for section in SECTIONS:
        if section not in data:
            continue
        try:
            value, section_issues = coerce_section(section, data[section])
        except ValueError as exc:
            issues.append(f"{exc}; default used")
            continue
        issues.extend(section_issues)
        present[section] = value
    return ContentDocument(**present), issues


def merge_section(document: ContentDocument, section: str, value: Any) -> ContentDocument:
    """Return a copy of *document* with *section* replaced wholesale."""
    validate_section_name(section)
    return document.model_copy(update={section: value}, deep=True)


def merge_documents(old: ContentDocument, new: ContentDocument) -> ContentDocument:
    """Overlay *new* on *old*: new values win, old values fill the gaps.

    Only sections/fields that *new* explicitly carries are taken from it.
    Object sections merge one level deep; list sections are replaced as a
    whole.
    """
    merged = old.model_copy(deep=True)
    for section in SECTIONS:
        if section not in new.model_fields_set:
            continue
        new_value = getattr(new, section)
        if section in LIST_SECTIONS:
            setattr(merged, section, [item.model_copy(deep=True) for item in new_value])
            continue
        old_value: _Section = getattr(merged, section)
        updates = {name: getattr(new_value, name) for name in new_value.model_fields_set}
        setattr(merged, section, old_value.model_copy(update=updates, deep=True))
    return merged


def dump_content(document: ContentDocument) -> str:
    """Serialise a document for storage."""
    return json.dumps(document.to_dict(), sort_keys=True, ensure_ascii=False)


def load_content(raw: str | None) -> ContentDocument:
    """Deserialise stored content, defaulting anything unusable."""
    if not raw:
        return default_content()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return default_content()
    if not isinstance(data, Mapping):
        return default_content()
    document, _ = coerce_document(data)
    # Stored content is authoritative for every section.
    return ContentDocument.model_validate(document.to_dict())
