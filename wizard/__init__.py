"""Wizard navigation, submission and rendering."""

from __future__ import annotations

import importlib
from typing import Any

# Submodules import ``state.session`` which imports this package again, so the
# public names resolve lazily.
_LAZY_EXPORTS: dict[str, str] = {
    "AppFlow": "app_flow",
    "AppView": "app_flow",
    "SectionStatus": "navigator",
    "SubmissionCoordinator": "submission",
    "SubmissionResult": "submission",
    "SubmissionStatus": "submission",
    "WizardNavigator": "navigator",
    "render_app": "ui",
}

__all__ = sorted(_LAZY_EXPORTS)


def __getattr__(name: str) -> Any:
    """Import the submodule that defines ``name`` on first access."""

    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__} has no attribute {name}")
    value = getattr(importlib.import_module(f"{__name__}.{module_name}"), name)
    globals()[name] = value
    return value
