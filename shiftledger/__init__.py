"""ShiftLedger: clock-in sessions, hour aggregation and payroll for field crews."""

__version__ = "1.0.0"
