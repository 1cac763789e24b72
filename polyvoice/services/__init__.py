"""Provider adapters for the three conversation stages."""
