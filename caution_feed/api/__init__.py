"""HTTP API layer.

Routers expose the caution feed read path and the manual refresh trigger.
"""
