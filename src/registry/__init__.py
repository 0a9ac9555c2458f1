"""Registry clients used to look up published crate versions."""
