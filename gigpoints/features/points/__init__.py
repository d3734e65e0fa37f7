"""
Points feature package.

Keeps every layer of the points/ranking flow co-located: the rank table
and domain records, the store boundary, the ledger and daily bonus
services, and the HTTP router.
"""
