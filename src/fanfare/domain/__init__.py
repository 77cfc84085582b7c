"""Domain layer - value types, records and codecs of the time-series store."""
