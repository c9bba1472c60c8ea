"""FastAPI surface for sitebridge sessions."""
