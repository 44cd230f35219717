"""Page-level wiring of the storefront state layer."""
