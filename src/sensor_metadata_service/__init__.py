"""Sensor metadata HTTP service."""
