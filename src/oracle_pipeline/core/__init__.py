"""Core types, contracts, and exceptions shared by every pipeline stage."""
