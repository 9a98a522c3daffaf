"""Operational scripts run with `python -m devstep.scripts.<name>`."""
