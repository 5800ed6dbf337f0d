"""Report generation and bulk import workflows built on the records facade."""
