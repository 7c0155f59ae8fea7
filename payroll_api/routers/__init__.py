"""HTTP routers of the payroll API."""
