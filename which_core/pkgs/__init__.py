"""Library packages: sandbox, core physics, engine runtime, observability."""
