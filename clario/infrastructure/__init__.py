"""Infrastructure layer: persistence, realtime and push delivery."""
