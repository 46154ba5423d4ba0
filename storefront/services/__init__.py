"""Services: money helpers, API models, the API client and domain services."""
