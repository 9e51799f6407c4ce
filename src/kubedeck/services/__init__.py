"""Service layer over the external integrations."""
