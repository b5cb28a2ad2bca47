"""Notification aggregation and delivery service for the Clario social network."""
