"""Database access helpers shared by the API blueprints and the CLI."""
