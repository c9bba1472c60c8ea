"""Cookie-aware HTTP proxying and page snapshot extraction."""
