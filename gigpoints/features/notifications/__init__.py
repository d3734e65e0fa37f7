"""
Notifications feature package: notification rows, the banner selection
and the rank-change subscriber on the points event bus.
"""
