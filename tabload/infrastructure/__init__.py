"""Infrastructure - parsers, snapshots, sources and caches."""
