"""Aggregation and reconciliation engine for a personal finance tracker."""
