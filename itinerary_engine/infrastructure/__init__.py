"""Infrastructure helpers: logging, caching, HTTP."""
