"""Click commands for the repofarm CLI."""
