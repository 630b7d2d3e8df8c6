"""TwinTech compressor telemetry simulator."""
