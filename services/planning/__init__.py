"""Delivery planning: phase-by-phase schedule sized from the squad's hours."""
