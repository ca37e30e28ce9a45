"""Perception - blob aggregation, depth obstacle scan, bumper contact, sensor inbox."""
