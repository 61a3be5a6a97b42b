"""Audio input and output for Melody Echo."""
