"""Foundation layer: configuration and error handling shared by every component."""
