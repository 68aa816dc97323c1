"""HTTP framework integrations for webProblem."""
