"""Flask application factory for the budget tracker API."""
