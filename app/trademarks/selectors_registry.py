from __future__ import annotations

"""Selectors and form targets for the UPRP advanced search."""

from dataclasses import dataclass
from typing import FrozenSet


@dataclass(frozen=True)
class RegistrySelectors:
    """CSS selectors for the registry's search, listing and detail views.

    The search form is a PrimeFaces-style widget: the real checkbox inputs are
    hidden and toggled by clicking the sibling ``.ui-chkbox-box`` element.
    """

    form_container: str = ".search-attr-container"
    date_from: str = "#attribute_date_from"
    date_to: str = "#attribute_date_to"
    submit_button: str = ".ui-button-secondary .ui-clickable"
    checkbox_input: str = 'input[type="checkbox"]'
    checkbox_wrapper: str = ".ui-chkbox"
    checkbox_box: str = ".ui-chkbox-box"
    results_table: str = ".search-table"
    info_message: str = ".tabs-info-message"
    table_row_link: str = "table tbody tr td a"
    pagination_next: str = "a.ui-paginator-next:not(.ui-state-disabled)"
    detail_panel: str = "section.panel"
    details_table: str = "table.details-list"
    detail_label_class: str = "detail-title"
    detail_highlight: str = ".highlight"


REGISTRY_SELECTORS = RegistrySelectors()

# Checkbox ids that must end checked; every other checkbox must end unchecked.
TARGET_CHECKBOXES: FrozenSet[str] = frozenset(
    {
        "pwp_criteria_0",
        "collections_criteria_advanced_7",
        "collections_criteria_advanced_7_child_attrs_0",
    }
)

# Lower-cased phrases the info message carries for the two terminal outcomes.
NO_RESULTS_PHRASE = "no results found"
TOO_MANY_RESULTS_PHRASE = "too many results found"

DETAIL_LABEL = "detail"

__all__ = [
    "RegistrySelectors",
    "REGISTRY_SELECTORS",
    "TARGET_CHECKBOXES",
    "NO_RESULTS_PHRASE",
    "TOO_MANY_RESULTS_PHRASE",
    "DETAIL_LABEL",
]
