"""Applications built on the which engine packages."""
