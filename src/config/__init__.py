"""Configuration settings for the tlidb item sync."""
