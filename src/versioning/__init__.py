"""Version specs, installed catalog and run-plan resolution."""
