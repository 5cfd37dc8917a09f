"""UserBank core: models, errors, identities, encoding helpers."""
