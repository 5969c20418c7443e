"""Pipeline CRM: prospect tracking over a hosted relational gateway."""

__version__ = "1.0.0"
