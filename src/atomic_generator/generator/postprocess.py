"""Naming passes applied to a built document before it is rendered."""

import csv
import re
from pathlib import Path

from atomic_generator.errors import ConfigError

from .models import WorkflowDocument


def load_acronyms(file_path: Path) -> list[str]:
    """Read acronyms from the first row of a CSV file."""
    try:
        with file_path.open(newline="", encoding="utf-8") as f:
            row = next(csv.reader(f), [])
    except OSError as e:
        raise ConfigError(f"failed to read acronyms file {file_path}: {e}") from e
    return [a.strip() for a in row if a.strip()]


def _acronym_patterns(acronyms: list[str]) -> list[tuple[re.Pattern, str]]:
    # longest first so "IPAM" wins over "IP"
    ordered = sorted({a.lower(): a for a in acronyms}.items(), key=lambda kv: (-len(kv[0]), kv[0]))
    return [(re.compile(rf"(?i)\b{re.escape(lower)}\b"), acronym) for lower, acronym in ordered]


def capitalize_acronyms(document: WorkflowDocument, acronyms: list[str], call_action_type: str) -> None:
    """Restore acronym casing in variable, call action and workflow names."""
    if not acronyms:
        return
    patterns = _acronym_patterns(acronyms)

    def replace(text: str) -> str:
        for pattern, acronym in patterns:
            text = pattern.sub(acronym, text)
        return text

    workflow = document.workflow
    for variable in workflow.variables:
        variable.properties.name = replace(variable.properties.name)
    for action in workflow.actions:
        if action.type == call_action_type:
            action.name = replace(action.name)
            action.title = replace(action.title)
    workflow.name = replace(workflow.name)
    workflow.title = replace(workflow.title)


def apply_platform_prefix(document: WorkflowDocument, platform: str) -> None:
    """Prefix the workflow name, title and display name with `<platform> - `."""
    if not platform.strip():
        return
    prefix = platform + " - "
    workflow = document.workflow
    workflow.name = prefix + workflow.name.replace("Partial Update", "Update")
    workflow.title = prefix + workflow.title.replace("Partial Update", "Update")
    workflow.properties.display_name = prefix + workflow.properties.display_name.replace("Partial Update", "Update")
