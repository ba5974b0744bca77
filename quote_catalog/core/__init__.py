"""Core domain models, enums and errors for Quote Catalog."""
