"""User interfaces for Melody Echo: a pygame window and a terminal runner."""
