"""Camera-to-disk sync pipeline."""
