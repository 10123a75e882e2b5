"""Price ingestion: platform price lookups and the daily fetch scheduler."""
