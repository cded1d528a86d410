"""Maintenance dashboard module for Maintrack."""

from .schemas import DashboardStats, MonthlyTrend

__all__ = ["DashboardStats", "MonthlyTrend"]
