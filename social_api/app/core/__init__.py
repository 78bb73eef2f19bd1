"""Configuration, logging, persistence primitives, security and wiring."""
