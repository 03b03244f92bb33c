"""Core pipeline: configuration, context, engine, results and errors."""
