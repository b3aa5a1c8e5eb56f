"""Data layer package: database connection, schema, migrations and repositories."""
