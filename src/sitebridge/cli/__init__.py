"""sitebridge command-line interface."""
