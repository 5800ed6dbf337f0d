"""Web dashboard over the clinic records facade."""
