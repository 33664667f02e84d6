"""
Cache tiers module.

Shared remote cache backends, the client-local durable store and the
merge-if-better policy that keeps every tier from regressing to empty.
"""
