"""Backend services for the workout insights engine."""
