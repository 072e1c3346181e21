"""Interactive textual UI for exporting Paper documents."""
