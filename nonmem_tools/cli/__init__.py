import click

from .commands.convert import convert_command
from .commands.pk import pk_command
from .commands.qc import qc_command
from .commands.validate import validate_command


@click.group()
@click.version_option(package_name="nonmem-tools")
def app() -> None:
    pass


app.add_command(convert_command, name="convert")
app.add_command(validate_command, name="validate")
app.add_command(pk_command, name="pk")
app.add_command(qc_command, name="qc")
__all__ = ["app"]
