"""Services built on loaded tables."""
