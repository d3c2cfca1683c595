"""Field store, derived fields, validation rules and media handling."""
