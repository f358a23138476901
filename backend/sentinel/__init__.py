"""SentinelZero risk engine service: configuration, evaluation pipeline and HTTP API."""
