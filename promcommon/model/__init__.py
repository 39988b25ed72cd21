"""Labels, metrics, fingerprints, alerts, silences, timestamps, durations and query values."""