"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every entity package uses (store
wiring, settings, identifiers, filters, validation, errors). Keep
entity-specific rules in the corresponding feature package (e.g.
`classes/`).
"""
