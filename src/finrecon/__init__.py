"""finrecon - recurring schedules and ledger reconciliation."""

__version__ = "0.1.0"


# Resolve the CLI entry point on first access; the CLI imports the whole package
def __getattr__(name):
    if name == "main":
        from finrecon.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
