"""Flask routes for the user accounts API."""
