"""Path graph and stroke tracking engine."""
