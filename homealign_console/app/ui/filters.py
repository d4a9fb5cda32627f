from __future__ import annotations

from collections.abc import Callable
from typing import Any

from homealign_console.app.entities import Choice, FieldKind, FilterDef

Prompt = Callable[[str], str]


def clean_filters(filters: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in filters.items() if value not in (None, "")}


def describe_choices(choices: tuple[Choice, ...]) -> str:
    return ", ".join(f"{value}={label}" for value, label in choices)


def prompt_filters(
    definitions: tuple[FilterDef, ...],
    current: dict[str, Any],
    choices_for: Callable[[FilterDef], tuple[Choice, ...]],
    prompt: Prompt = input,
) -> dict[str, Any]:
    """Ask for every filter of an entity, keeping the current value on blank input.

    A single ``-`` clears the filter.
    """
    updated = dict(current)
    for definition in definitions:
        choices = choices_for(definition)
        hint = f" [{describe_choices(choices)}]" if choices else ""
        existing = current.get(definition.key)
        shown = f" (current: {existing})" if existing not in (None, "") else ""
        raw = prompt(f"{definition.label}{hint}{shown}: ").strip()
        if not raw:
            continue
        if raw == "-":
            updated.pop(definition.key, None)
            continue
        if definition.kind is FieldKind.BOOL:
            raw = raw.lower()
        updated[definition.key] = raw
    return clean_filters(updated)
