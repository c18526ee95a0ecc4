"""ruuvibridge - RuuviTag to InfluxDB bridge."""
