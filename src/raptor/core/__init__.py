"""Core infrastructure shared by every Raptor subsystem."""
