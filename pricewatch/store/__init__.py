"""
In-memory stores for last known prices and the exchange event log.
"""
