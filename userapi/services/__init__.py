"""Integrations with the users datastore and the mail service."""
