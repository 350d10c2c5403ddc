"""
Display panel views inside a marimo notebook.

Usage in a cell::

    table_ui = table_element(table_panel)
    table_ui

and in a downstream cell::

    selection = sync_table_selection(table_panel, table_ui)
    plot_panel.on_selection_changed(selection)
    view_element(plot_panel.render())
"""

import marimo as mo

from pathway_panels.panels.base_panel import PanelView, Selection
from pathway_panels.panels.pathways_table import PathwaysTable


def message_element(view: PanelView):
    return mo.callout(mo.md(view.message or ""), kind="warn")


def details_element(details):
    if details is None:
        return None
    if isinstance(details, str):
        return mo.md(details)
    return details


def view_element(view: PanelView):
    """
    Convert a rendered view into a marimo element.

    Tables become a static single-selection table, plots a plotly element,
    messages a warning callout.
    """
    if view.kind == "message":
        return message_element(view)
    if view.kind == "plot":
        return mo.ui.plotly(view.figure)
    if view.kind == "table":
        content = mo.ui.table(view.table.to_pandas(), selection="single", label=view.title)
        details = details_element(view.details)
        return content if details is None else mo.vstack([content, details])
    raise ValueError(f"Unknown view kind: {view.kind}")


def table_element(panel: PathwaysTable):
    """
    Selectable marimo table for `panel`, or a callout when the results are missing.
    """
    view = panel.render()
    if view.kind == "message":
        return message_element(view)
    return mo.ui.table(
        view.table.to_pandas(),
        selection="single",
        page_size=panel.config.page_size,
        label=view.title,
    )


def sync_table_selection(panel: PathwaysTable, element) -> Selection:
    """
    Push the row picked in a :func:`table_element` into `panel` and return the selection.
    """
    value = getattr(element, "value", None)
    if value is None or len(value) == 0:
        return panel.select(None)
    return panel.select(str(value["pathway"].iloc[0]))
