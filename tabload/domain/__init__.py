"""Domain layer - workspace and data models.

This package contains the objects loads produce and the models that
describe them, independent of the parsers and the HTTP surface.
"""
