"""Sub-command groups registered on the root :data:`fetchcache.app.app`."""
