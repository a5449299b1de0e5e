"""HTTP API for SheetMap."""
