"""Service layer: business rules and every db.session commit live here."""
