from __future__ import annotations

from copy import deepcopy
from typing import Any, TypedDict


class FloatSettings(TypedDict, total=False):
    scope: str
    header: str | list[str]
    source: bool | str
    severity_sort: bool | dict[str, Any]
    focus_id: str


class HighlightColors(TypedDict, total=False):
    DiagnosticFloatingError: str
    DiagnosticFloatingWarn: str
    DiagnosticFloatingInfo: str
    DiagnosticFloatingHint: str
    NormalFloat: str
    Bold: str


class HoverSettings(TypedDict, total=False):
    enabled: bool
    diagnostics_scope: str
    diagnostics_header: str | list[str] | bool


class DiagnosticSettings(TypedDict, total=False):
    signs: bool | dict[str, Any]
    underline: bool | dict[str, Any]
    virtual_text: bool | dict[str, Any]
    float: bool | FloatSettings
    update_in_insert: bool | dict[str, Any]
    severity_sort: bool | dict[str, Any]
    highlights: HighlightColors
    hover: HoverSettings


# Keys of DiagnosticSettings that belong to the engine's global option table.
OPTION_KEYS = ("signs", "underline", "virtual_text", "float", "update_in_insert", "severity_sort")


def default_diagnostic_settings() -> DiagnosticSettings:
    defaults: DiagnosticSettings = {
        "signs": True,
        "underline": True,
        "virtual_text": True,
        "float": True,
        "update_in_insert": False,
        "severity_sort": False,
        "highlights": {
            "DiagnosticFloatingError": "#E35D6A",
            "DiagnosticFloatingWarn": "#D6A54A",
            "DiagnosticFloatingInfo": "#6AA1FF",
            "DiagnosticFloatingHint": "#8F9AA5",
            "NormalFloat": "#cfd7e6",
            "Bold": "#e6e6e6",
        },
        "hover": {
            "enabled": True,
            "diagnostics_scope": "line",
            "diagnostics_header": False,
        },
    }
    return deepcopy(defaults)


def global_options_from_settings(settings: dict[str, Any]) -> dict[str, Any]:
    return {key: deepcopy(settings[key]) for key in OPTION_KEYS if key in settings}
