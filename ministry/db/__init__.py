"""Database engine and table setup."""
