"""Geofenced punch attendance package.

Organized by feature modules (geofence, punches, anomalies, compliance,
reports, ...) with a thin Flask controller layer over service/repository
layers backed by MySQL.
"""
