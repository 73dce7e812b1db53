"""HTTP-facing helpers shared by the routers."""
