"""REST API for the CRM analytics service."""
