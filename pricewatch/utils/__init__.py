"""
Utility functions module.

Time Semantics:
- All engine timestamps are timezone-aware UTC datetimes
- Event log lines render wall-clock time only (HH:MM:SS)
- Latency figures are measured with a monotonic clock, never wall-clock time
"""
