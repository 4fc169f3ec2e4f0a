"""
Operator-facing output: coloured status lines written with click.
"""
import click


class Console:
    """
    Prints the success/warning/error/info lines the CLI shows.
    Errors go to stderr, everything else to stdout.
    """

    def __init__(self, app_name: str = "Application"):
        self.app_name = app_name

    def header(self, title: str = "Production Deployment"):
        rule = "=" * 44
        click.secho(rule, fg="blue")
        click.secho(f"  {self.app_name} - {title}", fg="blue")
        click.secho(rule, fg="blue")

    def success(self, message: str):
        click.secho(f"✅ {message}", fg="green")

    def warning(self, message: str):
        click.secho(f"⚠️  {message}", fg="yellow")

    def error(self, message: str):
        click.secho(f"❌ {message}", fg="red", err=True)

    def info(self, message: str):
        click.secho(f"ℹ️  {message}", fg="blue")

    def line(self, message: str = ""):
        click.echo(message)

    def progress(self):
        """Prints a poll-progress dot without a newline."""
        click.echo(".", nl=False)

    def confirm(self, question: str) -> bool:
        """Asks a yes/no question; end of input or Ctrl+C counts as no."""
        try:
            return click.confirm(question, default=False)
        except click.Abort:
            click.echo()
            return False
