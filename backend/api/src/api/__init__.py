"""REST API for the Layback Garments backend."""
