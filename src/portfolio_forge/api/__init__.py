"""HTTP surface for portfolio-forge."""
