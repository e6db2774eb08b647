"""Optional Bundleman extensions."""
