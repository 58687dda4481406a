"""CLI subcommands for jobhistory."""
