"""HTTP surface. routes.bp holds /api/health and /api/orders/{validate,preview,generate}."""
