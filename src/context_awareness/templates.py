"""Template catalog and manifest loading.

Templates ship inside the package under ``templates/``:

- ``templates/catalog.json`` lists every installable template
- ``templates/<id>/template.json`` describes one bundle (thresholds file,
  hooks, agents, directories, CLAUDE.md snippet)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from context_awareness.errors import ManifestInvalidError, TemplateNotFoundError
from context_awareness.paths import get_templates_dir

logger = logging.getLogger(__name__)

CATALOG_FILE = "catalog.json"
MANIFEST_FILE = "template.json"


class TemplateSummary(BaseModel):
    """Catalog entry shown by ``list``."""

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""


class Catalog(BaseModel):
    templates: List[TemplateSummary] = Field(default_factory=list)

    def find(self, template_id: str) -> Optional[TemplateSummary]:
        return next((t for t in self.templates if t.id == template_id), None)


class HookSpec(BaseModel):
    """One hook script registered under a host event."""

    event: str = Field(..., min_length=1, description="Host event name, e.g. 'PreToolUse'")
    matcher: str = Field(default="", description="Tool matcher; empty matches everything")
    script: str = Field(..., min_length=1, description="Script path relative to the template directory")


class AgentSpec(BaseModel):
    """An agent file copied into the ``.claude`` directory."""

    source: str = Field(..., min_length=1, description="Path relative to the template directory")
    dest: str = Field(..., min_length=1, description="Path relative to the .claude directory")


class TemplateManifest(BaseModel):
    """Parsed ``template.json``.

    Attributes:
        thresholds_file: Threshold list to upsert into config.json
        thresholds_level_prefix: Level prefix used to remove those thresholds again
        hooks: Hook scripts to copy and register, in order
        agents: Agent files to copy, in order
        directories: Directories to create under ``.claude``
        claude_snippet: Markdown appended to the project CLAUDE.md
        claude_snippet_marker: Text whose presence in CLAUDE.md means the snippet is already there
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    thresholds_file: Optional[str] = None
    thresholds_level_prefix: Optional[str] = None
    hooks: List[HookSpec] = Field(default_factory=list)
    agents: List[AgentSpec] = Field(default_factory=list)
    directories: List[str] = Field(default_factory=list)
    claude_snippet: Optional[str] = None
    claude_snippet_marker: Optional[str] = None


class ThresholdRecord(BaseModel):
    """A single threshold; unknown fields are kept as-is."""

    model_config = ConfigDict(extra="allow")

    level: str = Field(..., min_length=1)
    percent: int = Field(..., ge=0, le=100)


def get_template_dir(template_id: str, templates_dir: Path | None = None) -> Path:
    return (templates_dir or get_templates_dir()) / template_id


def load_catalog(templates_dir: Path | None = None) -> Catalog:
    """Load the template catalog."""
    catalog_path = (templates_dir or get_templates_dir()) / CATALOG_FILE
    data = json.loads(catalog_path.read_text(encoding="utf-8"))
    return Catalog.model_validate(data)


def _load_json(template_id: str, path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestInvalidError(template_id, path, str(exc)) from exc


def load_template_manifest(template_id: str, templates_dir: Path | None = None) -> TemplateManifest:
    """Load a template's ``template.json``.

    Raises:
        TemplateNotFoundError: If the manifest does not exist.
        ManifestInvalidError: If it exists but does not parse or validate.
    """
    manifest_path = get_template_dir(template_id, templates_dir) / MANIFEST_FILE
    if not manifest_path.is_file():
        raise TemplateNotFoundError(template_id)

    data = _load_json(template_id, manifest_path)
    try:
        return TemplateManifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestInvalidError(template_id, manifest_path, str(exc)) from exc


def load_template_thresholds(
    template_id: str,
    manifest: TemplateManifest,
    templates_dir: Path | None = None,
) -> list[dict[str, Any]]:
    """Load and validate the thresholds file a manifest points at.

    Returns plain dicts (extra fields preserved) ready for
    :func:`context_awareness.config.upsert_thresholds`. Returns an empty list
    when the manifest declares no thresholds file.
    """
    if not manifest.thresholds_file:
        return []

    path = get_template_dir(template_id, templates_dir) / manifest.thresholds_file
    data = _load_json(template_id, path)
    if not isinstance(data, list):
        raise ManifestInvalidError(template_id, path, "expected a list of thresholds")

    try:
        records = [ThresholdRecord.model_validate(item) for item in data]
    except ValidationError as exc:
        raise ManifestInvalidError(template_id, path, str(exc)) from exc

    logger.debug("Loaded %d thresholds for template %s", len(records), template_id)
    return [record.model_dump() for record in records]
