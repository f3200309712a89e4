"""Constants shared across blockcheck modules."""
