"""Expert consulting-hours booking engine."""
