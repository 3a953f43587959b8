"""Invoice PDF templates and rendering."""
