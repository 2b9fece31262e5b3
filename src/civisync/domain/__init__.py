"""Domain logic for specification-driven CiviCRM synchronisation."""
