"""Azure Storage service clients."""
