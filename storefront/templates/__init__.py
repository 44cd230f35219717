"""Element templates for page regions."""
