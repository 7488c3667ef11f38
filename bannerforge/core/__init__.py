"""Generation engine: loading, filtering, templating, reconciliation, packaging."""
