"""HTTP API blueprints for the user service."""
