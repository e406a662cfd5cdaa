"""fintrack - personal finance tracking."""

__version__ = "0.1.0"


# Import main lazily so `import fintrack` stays free of the CLI stack
def __getattr__(name):
    if name == "main":
        from fintrack.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
