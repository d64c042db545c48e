"""Entry point for ``python -m bloomly.cli``."""

from .bloomly_charts import cli

if __name__ == "__main__":
    cli(prog_name="bloomly-charts")
