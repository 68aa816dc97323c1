"""Command line interface for webProblem."""
