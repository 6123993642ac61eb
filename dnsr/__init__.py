"""DNS Service Reconciler (DNSR).

Keeps a DNS provider's record set in step with the service instances reported
by a metadata source:
 - builds the desired record set from discovered instances
 - reads the records the provider currently serves for this environment
 - diffs the two and applies adds, removes and updates concurrently

Each pass is stateless; the provider is the durable store.
"""
