"""Field descriptors and the error taxonomy."""
